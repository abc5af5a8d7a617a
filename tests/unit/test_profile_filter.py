import pytest
from composekit.MODELS.compose_document import ResolvedConfig
from composekit.MODELS.service_definition import ServiceDefinition
from composekit.RESOLVERS.profile_filter import ProfileFilter


@pytest.fixture
def resolved():
    return ResolvedConfig(
        services=(
            ServiceDefinition(name='db', config={'image': 'postgres'}),
            ServiceDefinition(name='backend', profiles=('dev',), config={'image': 'app'}),
            ServiceDefinition(name='debugger', profiles=('debug', 'dev'), config={}),
            ServiceDefinition(name='metrics', profiles=('Prod',), config={}),
        ),
        sources=('compose.yaml',),
    )


@pytest.mark.parametrize("profile", [None, "dev", "prod"])
def test_profileless_service_always_active(resolved, profile):
    assert 'db' in ProfileFilter().filter(resolved, profile)


@pytest.mark.parametrize("profile,expected", [
    (None, False),
    ("prod", False),
    ("dev", True),
])
def test_profiled_service_only_with_its_profile(resolved, profile, expected):
    assert ('backend' in ProfileFilter().filter(resolved, profile)) is expected


def test_no_profile_selects_only_profileless(resolved):
    active = ProfileFilter().filter(resolved, None)
    assert active.names == ['db']
    assert active.profiles == ()


def test_profiles_case_sensitive(resolved):
    assert 'metrics' not in ProfileFilter().filter(resolved, 'prod')
    assert 'metrics' in ProfileFilter().filter(resolved, 'Prod')


def test_several_profiles(resolved):
    active = ProfileFilter().filter(resolved, ['debug', 'Prod'])
    assert active.names == ['db', 'debugger', 'metrics']
    assert active.profiles == ('debug', 'Prod')


def test_no_prefix_or_wildcard_matching(resolved):
    assert ProfileFilter().filter(resolved, 'de').names == ['db']
    assert ProfileFilter().filter(resolved, '*').names == ['db']


def test_active_config_is_a_copy(resolved):
    active = ProfileFilter().filter(resolved, 'dev')
    active['backend']['image'] = 'changed'
    assert resolved.get('backend').config['image'] == 'app'


def test_all_profiles(resolved):
    assert ProfileFilter.all_profiles(resolved) == ['Prod', 'debug', 'dev']


def test_normalize():
    assert ProfileFilter.normalize(None) == ()
    assert ProfileFilter.normalize('') == ()
    assert ProfileFilter.normalize('dev') == ('dev',)
    assert ProfileFilter.normalize(['dev', '', 'dev', 'ci']) == ('dev', 'ci')


def test_is_active_rules():
    plain = ServiceDefinition(name='db')
    dev = ServiceDefinition(name='backend', profiles=('dev',))
    assert plain.is_always_active()
    assert ProfileFilter.is_active(plain, ())
    assert not dev.is_always_active()
    assert not ProfileFilter.is_active(dev, ())
    assert ProfileFilter.is_active(dev, ('prod', 'dev'))
