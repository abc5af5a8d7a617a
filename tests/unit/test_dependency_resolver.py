import logging
import sys
import pytest
from composekit.MODELS.compose_document import ActiveServiceSet
from composekit.RUNNERS.dependency_resolver import DependencyResolver
from composekit.exceptions import DependencyCycleError


def active(**deps):
    return ActiveServiceSet(services={
        name: {'depends_on': {d: {'condition': 'service_started'} for d in names}}
        for name, names in deps.items()
    })


def test_dependencies_first():
    order = DependencyResolver().resolve_order(active(web=['api'], api=['db', 'cache'], db=[], cache=[]))
    assert order == ['db', 'cache', 'api', 'web']


def test_independent_services_keep_order():
    assert DependencyResolver().resolve_order(active(b=[], a=[], c=[])) == ['b', 'a', 'c']


def test_shutdown_order_reversed():
    assert DependencyResolver().shutdown_order(active(web=['db'], db=[])) == ['web', 'db']


def test_inactive_dependency_skipped(caplog):
    with caplog.at_level(logging.WARNING):
        order = DependencyResolver().resolve_order(active(web=['debugger']))
    assert order == ['web']
    assert 'debugger' in caplog.text


def test_list_depends_on_accepted():
    services = ActiveServiceSet(services={'web': {'depends_on': ['db']}, 'db': {}})
    assert DependencyResolver().resolve_order(services) == ['db', 'web']


def test_cycle_detected():
    with pytest.raises(DependencyCycleError) as exc:
        DependencyResolver().resolve_order(active(a=['b'], b=['c'], c=['a']))
    assert exc.value.cycle == ['a', 'b', 'c', 'a']


def test_cycle_reported_from_entry_point():
    with pytest.raises(DependencyCycleError) as exc:
        DependencyResolver().resolve_order(active(web=['a'], a=['b'], b=['a']))
    assert exc.value.cycle == ['a', 'b', 'a']


def test_self_dependency_is_cycle():
    with pytest.raises(DependencyCycleError) as exc:
        DependencyResolver().resolve_order(active(web=['web']))
    assert exc.value.cycle == ['web', 'web']


def test_chain_deeper_than_recursion_limit():
    depth = sys.getrecursionlimit() + 100
    services = {f"s{i}": {'depends_on': [f"s{i + 1}"]} for i in range(depth)}
    services[f"s{depth}"] = {}
    order = DependencyResolver().resolve_order(ActiveServiceSet(services=services))
    assert order == [f"s{i}" for i in range(depth, -1, -1)]
