"""Shared fixtures for matters app tests."""

from pathlib import Path

import pytest
from django.contrib.auth import get_user_model

from server.apps.matters.logic.paths import (
    absolute_path,
    get_storage,
    join_path,
    root_matter,
)
from server.apps.matters.models import MATTER_ROOT, ImageCache, Matter

User = get_user_model()


@pytest.fixture(autouse=True)
def matter_storage(settings, tmp_path):
    """Point the default storage at a temporary directory.

    Returns:
        MatterStorage instance rooted in tmp_path.
    """
    settings.STORAGES = {
        **settings.STORAGES,
        'default': {
            'BACKEND': 'server.apps.matters.infrastructure.storage.MatterStorage',
            'OPTIONS': {'location': str(tmp_path / 'matter')},
        },
    }
    return get_storage()


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def root(user):
    """Synthesized root directory of the test user."""
    return root_matter(user)


@pytest.fixture
def assert_tree_consistent():
    """Check that rows and the physical tree of a user agree.

    Returns:
        Function taking a user and failing on the first mismatch.
    """

    def check(owner) -> None:
        matters = {matter.uuid: matter for matter in owner.matters.all()}
        for matter in matters.values():
            if matter.parent_uuid == MATTER_ROOT:
                parent_path = ''
            else:
                parent_path = matters[matter.parent_uuid].path
            assert matter.path == join_path(parent_path, matter.name)

            physical = Path(absolute_path(matter))
            assert physical.exists(), matter.path
            assert physical.is_dir() == matter.is_dir

    return check


@pytest.fixture
def make_file(db):
    """Factory creating a file row with its physical content.

    Bypasses the matter operations, like rows written by another tool.

    Returns:
        Function (owner, parent, name, content) -> Matter.
    """

    def create(owner, parent, name, content=b'content'):
        matter = Matter.objects.create(
            parent_uuid=parent.uuid,
            user=owner,
            username=owner.username,
            is_dir=False,
            name=name,
            path=join_path(parent.path, name),
            size=len(content),
        )
        physical = Path(absolute_path(matter))
        physical.parent.mkdir(parents=True, exist_ok=True)
        physical.write_bytes(content)
        return matter

    return create


@pytest.fixture
def make_image_cache(matter_storage):
    """Factory creating an image cache row with its artifact file.

    Returns:
        Function (matter, mode) -> ImageCache.
    """

    def create(matter, mode='small'):
        artifact = f'{matter.username}/cache/{matter.uuid}_{mode}.jpg'
        matter_storage.makedirs(f'{matter.username}/cache')
        Path(matter_storage.path(artifact)).write_bytes(b'thumbnail')
        return ImageCache.objects.create(
            matter=matter,
            mode=mode,
            path=artifact,
            size=len(b'thumbnail'),
        )

    return create
