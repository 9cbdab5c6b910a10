"""
Tests for ClipRegistry and media resource ownership.
"""
import pytest

from cliprail.core.errors import InvalidReference
from cliprail.core.models import MediaHandle, sanitize_duration
from cliprail.core.registry import ClipRegistry


def _registry_with(*names):
    registry = ClipRegistry()
    clips = [registry.add(n, MediaHandle(f"/m/{n}.mov"), "1 KB", "video/quicktime", track=i % 2)
             for i, n in enumerate(names)]
    return registry, clips


def test_ids_are_unique_and_order_is_import_order():
    registry, clips = _registry_with("a", "b", "c")
    assert len({c.id for c in clips}) == 3
    assert [c.name for c in registry] == ["a", "b", "c"]
    assert [c.track for c in registry] == [0, 1, 0]
    assert all(c.duration == 0 for c in registry)


def test_set_duration_sanitizes_probe_results():
    registry, (a,) = _registry_with("a")
    assert registry.set_duration(a.id, 12.5).duration == 12.5
    assert registry.set_duration(a.id, float("nan")).duration == 0
    assert registry.set_duration(a.id, -3).duration == 0
    assert registry.get(a.id).resource is a.resource
    with pytest.raises(InvalidReference):
        registry.set_duration("missing", 3)


def test_remove_releases_exactly_once():
    registry, (a, b) = _registry_with("a", "b")
    removed = registry.remove(a.id)
    assert removed.id == a.id
    assert a.resource.released
    assert registry.remove(a.id) is None
    assert not b.resource.released


def test_teardown_releases_remaining_resources():
    registry, clips = _registry_with("a", "b")
    registry.remove(clips[0].id)
    registry.teardown()
    assert registry.is_empty
    assert all(c.resource.released for c in clips)


def test_replace_sequence_requires_permutation():
    registry, (a, b) = _registry_with("a", "b")
    registry.replace_sequence([b, a])
    assert [c.id for c in registry] == [b.id, a.id]
    with pytest.raises(ValueError):
        registry.replace_sequence([a])


def test_double_release_is_reported(caplog):
    handle = MediaHandle("/m/x.mp4")
    assert handle.release()
    assert not handle.release()
    assert "released twice" in caplog.text


def test_owned_file_is_deleted_on_release(tmp_path):
    media = tmp_path / "drop.webm"
    media.write_bytes(b"\x1a\x45\xdf\xa3")
    with MediaHandle(media, owns_file=True) as handle:
        assert handle.uri.startswith("file://")
    assert handle.released
    assert not media.exists()


@pytest.mark.parametrize("raw, expected", [(None, 0), ("4.5", 4.5), ("abc", 0), (float("inf"), 0), (7, 7)])
def test_sanitize_duration(raw, expected):
    assert sanitize_duration(raw) == expected
