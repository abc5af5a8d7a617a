"""
Parser for the .env files that feed compose variable interpolation.
"""
import io
from typing import Dict, Optional
from dotenv import dotenv_values
from ..exceptions import NotFoundError, ParseError


class EnvParser:
    """
    Parser for .env files, backed by python-dotenv.
    Lines without a value ("KEY") are skipped; ${VAR} inside values is left as written.
    """
    @staticmethod
    def parse(env_path: str) -> Dict[str, str]:
        """
        Parses an .env file from a path.

        Args:
            env_path (str): Path to the .env file.

        Returns:
            Dict[str, str]: Dictionary of variables, later lines win.

        Raises:
            ParseError: If the file is not valid UTF-8.
            NotFoundError: If the file cannot be read.
        """
        try:
            with open(env_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except UnicodeDecodeError as e:
            raise ParseError(f"Env file is not valid UTF-8: {e.reason}", path=env_path) from e
        except OSError as e:
            raise NotFoundError(env_path, f"Env file cannot be read: {env_path} ({e.strerror})") from e
        return EnvParser.parse_from_string(content)

    @staticmethod
    def parse_from_string(content: str) -> Dict[str, str]:
        """
        Parses variables from a string.
        """
        values: Dict[str, Optional[str]] = dotenv_values(stream=io.StringIO(content), interpolate=False)
        return {key: value for key, value in values.items() if value is not None}
