"""Tests for upload, crawl, directory and delete operations."""

from contextlib import contextmanager
from io import BytesIO
from pathlib import Path

import pytest
import requests

from server.apps.matters.exceptions import (
    ErrorKind,
    MatterConflictError,
    MatterIOError,
    MatterValidationError,
    QuotaExceededError,
)
from server.apps.matters.logic import matter_operations
from server.apps.matters.logic.locks import user_locks
from server.apps.matters.logic.matter_operations import (
    atomic_create_directories,
    atomic_create_directory,
    atomic_crawl,
    atomic_delete,
    atomic_upload,
    create_directories,
    create_directory,
    delete_matter,
    list_directory,
    upload,
)
from server.apps.matters.logic.paths import absolute_path
from server.apps.matters.logic.quota_operations import set_size_limit
from server.apps.matters.models import (
    MATTER_NAME_MAX_DEPTH,
    MATTER_NAME_MAX_LENGTH,
    MATTER_ROOT,
    ImageCache,
    Matter,
)


class _BrokenStream:
    """Stream failing halfway like a dropped connection."""

    def __init__(self):
        self._calls = 0

    def read(self, size=-1):
        self._calls += 1
        if self._calls > 1:
            raise ConnectionResetError('connection reset')
        return b'partial'


@pytest.mark.django_db
class TestUpload:
    """Tests for upload and atomic_upload."""

    def test_upload_success(self, user, root, assert_tree_consistent):
        """Test upload writes the file and creates the row."""
        matter = atomic_upload(BytesIO(b'x' * 500), user, root, 'a.txt')

        assert matter.size == 500
        assert matter.path == '/a.txt'
        assert matter.parent_uuid == MATTER_ROOT
        assert matter.is_dir is False
        assert matter.content_hash == ''
        assert matter.privacy is True
        assert Path(absolute_path(matter)).read_bytes() == b'x' * 500
        assert_tree_consistent(user)

    def test_upload_into_subdirectory(self, user, assert_tree_consistent):
        """Test upload into a nested directory."""
        directory = create_directories(user, '/docs/2024')

        matter = atomic_upload(
            BytesIO(b'report'),
            user,
            directory,
            'report.pdf',
            privacy=False,
        )

        assert matter.path == '/docs/2024/report.pdf'
        assert matter.parent_uuid == directory.uuid
        assert matter.privacy is False
        assert list(list_directory(directory)) == [matter]
        assert_tree_consistent(user)

    def test_upload_scenario_with_quota_and_overwrite(self, user, root):
        """Test the quota, conflict and overwrite upload scenario."""
        set_size_limit(user, 1000)

        first = atomic_upload(BytesIO(b'a' * 500), user, root, 'a.txt')
        assert first.size == 500

        with pytest.raises(MatterConflictError) as exc_info:
            atomic_upload(BytesIO(b'b' * 300), user, root, 'a.txt')
        assert exc_info.value.kind is ErrorKind.CONFLICT
        assert Path(absolute_path(first)).read_bytes() == b'a' * 500

        second = atomic_upload(
            BytesIO(b'b' * 300),
            user,
            root,
            'a.txt',
            overwrite=True,
        )

        assert not Matter.objects.filter(uuid=first.uuid).exists()
        assert second.uuid != first.uuid
        assert second.size == 300
        assert Path(absolute_path(second)).read_bytes() == b'b' * 300
        assert Matter.objects.filter(user=user).count() == 1

    def test_upload_quota_exceeded(self, user, root):
        """Test oversized uploads leave no file and no row behind."""
        set_size_limit(user, 1000)

        with pytest.raises(QuotaExceededError) as exc_info:
            atomic_upload(BytesIO(b'x' * 1001), user, root, 'big.bin')

        assert exc_info.value.kind is ErrorKind.QUOTA
        assert not Matter.objects.filter(user=user).exists()
        assert not Path(absolute_path(root), 'big.bin').exists()

    def test_upload_unlimited_quota(self, user, root):
        """Test negative limits allow any size."""
        set_size_limit(user, -1)

        matter = atomic_upload(BytesIO(b'x' * 5000), user, root, 'big.bin')

        assert matter.size == 5000

    def test_upload_conflict_without_lock(self, user, root):
        """Test the non-atomic upload refuses an existing file name."""
        upload(BytesIO(b'a'), user, root, 'a.txt')

        with pytest.raises(MatterConflictError):
            upload(BytesIO(b'b'), user, root, 'a.txt')

    def test_upload_filename_too_long(self, user, root):
        """Test long filenames are rejected before writing."""
        with pytest.raises(MatterValidationError):
            atomic_upload(
                BytesIO(b'a'),
                user,
                root,
                'a' * (MATTER_NAME_MAX_LENGTH + 1),
            )

        assert not Matter.objects.exists()

    def test_upload_requires_user_and_directory(self, user, root):
        """Test missing user or directory are validation errors."""
        with pytest.raises(MatterValidationError):
            atomic_upload(BytesIO(b'a'), None, root, 'a.txt')

        with pytest.raises(MatterValidationError):
            atomic_upload(BytesIO(b'a'), user, None, 'a.txt')

    def test_upload_into_file_rejected(self, user, root):
        """Test the target must be a directory."""
        matter = atomic_upload(BytesIO(b'a'), user, root, 'a.txt')

        with pytest.raises(MatterValidationError):
            atomic_upload(BytesIO(b'b'), user, matter, 'b.txt')

    def test_upload_into_other_users_directory(self, user, other_user):
        """Test users can not upload into another user's tree."""
        directory = create_directories(other_user, '/shared')

        with pytest.raises(MatterValidationError):
            atomic_upload(BytesIO(b'a'), user, directory, 'a.txt')

    def test_upload_replaces_stale_physical_file(self, user, root):
        """Test a file on disk without a row is replaced."""
        stale = Path(absolute_path(root), 'a.txt')
        stale.write_bytes(b'stale content')

        matter = atomic_upload(BytesIO(b'fresh'), user, root, 'a.txt')

        assert matter.size == 5
        assert stale.read_bytes() == b'fresh'

    def test_upload_refuses_sibling_directory_name(
        self,
        user,
        root,
        make_file,
        assert_tree_consistent,
    ):
        """Test a file can not take the name of a sibling directory."""
        photos = create_directories(user, '/photos')
        kept = make_file(user, photos, 'cat.jpg', b'meow')

        with pytest.raises(MatterConflictError):
            upload(BytesIO(b'x'), user, root, 'photos')

        assert Path(absolute_path(kept)).read_bytes() == b'meow'
        assert Matter.objects.filter(user=user).count() == 2
        assert_tree_consistent(user)

    def test_upload_refuses_unknown_physical_directory(self, user, root):
        """Test a directory on disk without a row is never replaced."""
        stray = Path(absolute_path(root), 'stray')
        stray.mkdir()
        (stray / 'keep.txt').write_bytes(b'keep')

        with pytest.raises(MatterConflictError):
            atomic_upload(BytesIO(b'x'), user, root, 'stray')

        assert (stray / 'keep.txt').read_bytes() == b'keep'
        assert not Matter.objects.exists()

    def test_upload_stream_failure(self, user, root):
        """Test a failing stream leaves no file, no row and no lock."""
        with pytest.raises(MatterIOError) as exc_info:
            atomic_upload(_BrokenStream(), user, root, 'a.txt')

        assert exc_info.value.kind is ErrorKind.IO_FATAL
        assert isinstance(exc_info.value.__cause__, ConnectionResetError)
        assert not Path(absolute_path(root), 'a.txt').exists()
        assert not Matter.objects.exists()
        assert not user_locks.is_locked(user.pk)


@pytest.mark.django_db
class TestCrawl:
    """Tests for atomic_crawl."""

    def test_crawl_uploads_body(self, user, root, monkeypatch):
        """Test the fetched body is stored as a new file."""
        fetched = []

        @contextmanager
        def fake_open_remote_stream(url):
            fetched.append(url)
            yield BytesIO(b'remote body')

        monkeypatch.setattr(
            matter_operations,
            'open_remote_stream',
            fake_open_remote_stream,
        )

        matter = atomic_crawl(
            'https://example.com/a.txt',
            'a.txt',
            user,
            root,
        )

        assert fetched == ['https://example.com/a.txt']
        assert matter.size == len(b'remote body')
        assert Path(absolute_path(matter)).read_bytes() == b'remote body'

    def test_crawl_invalid_url(self, user, root, monkeypatch):
        """Test non-http urls are rejected without fetching."""

        def fail(url):
            raise AssertionError('must not fetch')

        monkeypatch.setattr(matter_operations, 'open_remote_stream', fail)

        with pytest.raises(MatterValidationError):
            atomic_crawl('ftp://example.com/a.txt', 'a.txt', user, root)

    def test_crawl_refuses_sibling_directory_name(
        self,
        user,
        root,
        make_file,
        monkeypatch,
    ):
        """Test a taken directory name fails before anything is fetched."""
        photos = create_directories(user, '/photos')
        kept = make_file(user, photos, 'cat.jpg', b'meow')

        def fail(url):
            raise AssertionError('must not fetch')

        monkeypatch.setattr(matter_operations, 'open_remote_stream', fail)

        with pytest.raises(MatterConflictError):
            atomic_crawl('https://example.com/a', 'photos', user, root)

        assert Path(absolute_path(kept)).read_bytes() == b'meow'
        assert not user_locks.is_locked(user.pk)

    def test_crawl_into_other_users_directory(
        self,
        user,
        other_user,
        monkeypatch,
    ):
        """Test ownership is checked before anything is fetched."""
        foreign = create_directories(other_user, '/inbox')

        def fail(url):
            raise AssertionError('must not fetch')

        monkeypatch.setattr(matter_operations, 'open_remote_stream', fail)

        with pytest.raises(MatterValidationError):
            atomic_crawl('https://example.com/a', 'a.txt', user, foreign)

        assert not Matter.objects.filter(user=user).exists()

    def test_crawl_transport_error(self, user, root, monkeypatch):
        """Test fetch failures are fatal and release the lock."""

        def unreachable(url):
            raise requests.ConnectionError('unreachable')

        monkeypatch.setattr(
            matter_operations,
            'open_remote_stream',
            unreachable,
        )

        with pytest.raises(MatterIOError):
            atomic_crawl('http://example.com/a.txt', 'a.txt', user, root)

        assert not Matter.objects.exists()
        assert not user_locks.is_locked(user.pk)


@pytest.mark.django_db
class TestCreateDirectory:
    """Tests for create_directory and atomic_create_directory."""

    def test_create_directory_once(self, user, root, assert_tree_consistent):
        """Test a (parent, owner, name) triple succeeds exactly once."""
        directory = atomic_create_directory(root, 'photos', user)

        assert directory.is_dir
        assert directory.path == '/photos'
        assert Path(absolute_path(directory)).is_dir()

        with pytest.raises(MatterConflictError):
            atomic_create_directory(root, 'photos', user)

        assert Matter.objects.filter(user=user).count() == 1
        assert_tree_consistent(user)

    def test_create_directory_strips_name(self, user, root):
        """Test names are stored without surrounding whitespace."""
        directory = atomic_create_directory(root, '  photos ', user)

        assert directory.name == 'photos'

    @pytest.mark.parametrize('name', ['', '  ', 'a/b', 'a\\b', 'a?', 'a*b'])
    def test_create_directory_invalid_name(self, user, root, name):
        """Test invalid names create nothing."""
        with pytest.raises(MatterValidationError):
            atomic_create_directory(root, name, user)

        assert not Matter.objects.exists()

    def test_create_directory_same_name_per_user(self, user, other_user):
        """Test different users can use the same name."""
        atomic_create_directory(create_directories(user, '/'), 'a', user)
        atomic_create_directory(
            create_directories(other_user, '/'),
            'a',
            other_user,
        )

        assert Matter.objects.count() == 2

    def test_create_directory_in_file(self, user, root):
        """Test the parent must be a directory."""
        matter = atomic_upload(BytesIO(b'a'), user, root, 'a.txt')

        with pytest.raises(MatterValidationError):
            create_directory(matter, 'sub', user)

    def test_create_directory_other_owner(self, user, other_user):
        """Test the parent must belong to the user."""
        directory = create_directories(other_user, '/shared')

        with pytest.raises(MatterValidationError):
            create_directory(directory, 'sub', user)

    def test_create_directory_depth_limit(self, user):
        """Test directories can not be nested deeper than the limit."""
        deepest = create_directories(user, '/d' * MATTER_NAME_MAX_DEPTH)

        with pytest.raises(MatterValidationError):
            create_directory(deepest, 'd', user)

    def test_create_directory_existing_physical(self, user, root):
        """Test a physical directory without a row is adopted."""
        Path(absolute_path(root), 'photos').mkdir()

        directory = atomic_create_directory(root, 'photos', user)

        assert directory.path == '/photos'


@pytest.mark.django_db
class TestCreateDirectories:
    """Tests for create_directories and atomic_create_directories."""

    def test_create_directories_scenario(self, user, assert_tree_consistent):
        """Test /x/y/z creates three rows and is idempotent."""
        deepest = atomic_create_directories(user, '/x/y/z')

        paths = sorted(Matter.objects.values_list('path', flat=True))
        assert paths == ['/x', '/x/y', '/x/y/z']
        assert deepest.path == '/x/y/z'

        again = atomic_create_directories(user, '/x/y/z/')

        assert again.uuid == deepest.uuid
        assert Matter.objects.count() == 3
        assert_tree_consistent(user)

    def test_create_directories_extends_existing(self, user):
        """Test only missing segments are created."""
        top = atomic_create_directories(user, '/x')

        deepest = atomic_create_directories(user, '/x/q')

        assert deepest.parent_uuid == top.uuid
        assert Matter.objects.count() == 2

    def test_create_directories_root(self, user, django_assert_num_queries):
        """Test '/' returns the root without touching the database."""
        with django_assert_num_queries(0):
            directory = create_directories(user, '/')

        assert directory.is_root

    @pytest.mark.parametrize('dir_path', ['x/y', '/x//y', '/x|y', ''])
    def test_create_directories_invalid(self, user, dir_path):
        """Test invalid paths create nothing."""
        with pytest.raises(MatterValidationError):
            atomic_create_directories(user, dir_path)

        assert not Matter.objects.exists()

    def test_create_directories_too_deep(self, user):
        """Test the depth limit applies to the whole path."""
        with pytest.raises(MatterValidationError):
            atomic_create_directories(
                user,
                '/d' * (MATTER_NAME_MAX_DEPTH + 1),
            )

        assert not Matter.objects.exists()


@pytest.mark.django_db
class TestDelete:
    """Tests for delete_matter and atomic_delete."""

    def test_delete_file(self, user, root):
        """Test the row and the physical file are removed."""
        matter = atomic_upload(BytesIO(b'a'), user, root, 'a.txt')
        physical = Path(absolute_path(matter))

        atomic_delete(matter)

        assert not Matter.objects.exists()
        assert not physical.exists()

    def test_delete_directory_subtree(
        self,
        user,
        make_file,
        make_image_cache,
        matter_storage,
    ):
        """Test every descendant row, file and cache goes away."""
        directory = create_directories(user, '/a')
        nested = create_directories(user, '/a/b/c')
        image = make_file(user, nested, 'cat.jpg')
        artifact = make_image_cache(image).path
        keep = create_directories(user, '/keep')
        physical = Path(absolute_path(directory))

        atomic_delete(directory)

        assert list(Matter.objects.all()) == [keep]
        assert not physical.exists()
        assert ImageCache.objects.count() == 0
        assert not matter_storage.exists(artifact)

    def test_delete_root_rejected(self, user, root):
        """Test the root can not be deleted."""
        with pytest.raises(MatterValidationError):
            delete_matter(root)

    def test_delete_requires_matter(self):
        """Test a missing matter is a validation error."""
        with pytest.raises(MatterValidationError):
            atomic_delete(None)
