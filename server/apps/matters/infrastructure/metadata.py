"""Name and path validation for matters."""

import re
from typing import Final

from server.apps.matters.exceptions import MatterValidationError
from server.apps.matters.models import (
    MATTER_NAME_MAX_DEPTH,
    MATTER_NAME_MAX_LENGTH,
)

_PATH_SEPARATOR: Final = '/'

# Characters that can not appear in a matter name
_RESERVED_NAME_CHARACTERS: Final = re.compile(r'[<>|*?/\\]')

# Same as above, except the separator which is allowed in a path
_RESERVED_PATH_CHARACTERS: Final = re.compile(r'[<>|*?\\]')

_FILENAME_SEPARATORS: Final = re.compile(r'[/\\]')


def normalize_matter_name(name: str) -> str:
    """Validate a directory name or a new name for a matter.

    Surrounding whitespace is stripped before validation.

    Args:
        name: Proposed name.

    Returns:
        Stripped name.

    Raises:
        MatterValidationError: If the name is empty, too long or contains
            one of the reserved characters ``< > | * ? / \\``.
    """
    name = (name or '').strip()
    if not name:
        raise MatterValidationError('Name is required and can not be blank')

    if len(name) > MATTER_NAME_MAX_LENGTH:
        raise MatterValidationError(
            f'Name can not be longer than {MATTER_NAME_MAX_LENGTH} characters',
        )

    if _RESERVED_NAME_CHARACTERS.search(name):
        raise MatterValidationError(
            r'Name can not contain any of: < > | * ? / \ ',
        )

    return name


def validate_filename(filename: str) -> None:
    """Validate the name of an uploaded file.

    Uploaded names are kept as given, only their length and the path
    separators are checked.

    Args:
        filename: Name the file will be stored under.

    Raises:
        MatterValidationError: If the filename is empty, too long or
            contains a path separator.
    """
    if not filename:
        raise MatterValidationError('Filename is required')

    if len(filename) > MATTER_NAME_MAX_LENGTH:
        raise MatterValidationError(
            f'Filename can not be longer than {MATTER_NAME_MAX_LENGTH} '
            'characters',
        )

    if _FILENAME_SEPARATORS.search(filename):
        raise MatterValidationError('Filename can not contain / or \\')


def split_directory_path(dir_path: str) -> list[str]:
    """Validate an absolute virtual directory path and split it.

    Example: '/photos/2024/' -> ['photos', '2024']

    Args:
        dir_path: Path starting at the user root, '/'-delimited.

    Returns:
        Directory names from the top down. Empty list for '/'.

    Raises:
        MatterValidationError: If the path is empty, relative, contains
            '//' or a reserved character, or is deeper than the limit.
    """
    if not dir_path:
        raise MatterValidationError('Directory path is required')

    if not dir_path.startswith(_PATH_SEPARATOR):
        raise MatterValidationError('Directory path must start with /')

    if '//' in dir_path:
        raise MatterValidationError('Directory path can not contain //')

    if _RESERVED_PATH_CHARACTERS.search(dir_path):
        raise MatterValidationError(
            r'Directory path can not contain any of: < > | * ? \ ',
        )

    segments = dir_path.strip(_PATH_SEPARATOR).split(_PATH_SEPARATOR)
    if segments == ['']:
        return []

    if len(segments) > MATTER_NAME_MAX_DEPTH:
        raise MatterValidationError(
            f'Directories can not be nested deeper than '
            f'{MATTER_NAME_MAX_DEPTH} levels',
        )

    return segments


def validate_crawl_url(url: str) -> None:
    """Check that a url to crawl is an http(s) url.

    Args:
        url: Remote resource url.

    Raises:
        MatterValidationError: If the url is empty or not http(s).
    """
    if not url or not url.startswith(('http://', 'https://')):
        raise MatterValidationError(
            'Url is required and must start with http:// or https://',
        )
