import pytest

from project_hub.application.deduplicator import Deduplicator, normalize_base_name


@pytest.mark.parametrize(
    "name,expected",
    [
        ("foo-bar-v1", "foo-bar"),
        ("Foo-Bar-V2", "foo-bar"),
        ("foo-bar_v3", "foo-bar"),
        ("foo-bar-version-2", "foo-bar"),
        ("foo-bar-version2", "foo-bar"),
        ("foo-bar-ver-1", "foo-bar"),
        ("foo-bar-ver1", "foo-bar"),
        ("foo-bar", "foo-bar"),
        ("v2-editor", "v2-editor"),
    ],
)
def test_normalize_base_name(name, expected):
    assert normalize_base_name(name) == expected


def test_versioned_names_are_accepted_once(make_candidate):
    dedup = Deduplicator()

    assert dedup.accept(make_candidate(name="foo-bar-v1"))
    assert not dedup.accept(make_candidate(name="foo-bar-v2"))


def test_same_source_id_is_rejected(make_candidate):
    dedup = Deduplicator()

    assert dedup.accept(make_candidate(id="42", name="chat-app"))
    assert not dedup.accept(make_candidate(id="42", name="renamed-chat-app"))


def test_rejected_candidate_does_not_claim_its_id(make_candidate):
    dedup = Deduplicator()
    dedup.accept(make_candidate(id="1", name="foo-bar"))

    assert not dedup.accept(make_candidate(id="2", name="foo-bar-v2"))
    assert "2" not in dedup.seen_ids


def test_seeded_names_are_treated_as_seen(make_candidate):
    dedup = Deduplicator(seen_names=["Chat-App-v3"])

    assert dedup.is_duplicate(make_candidate(name="chat-app"))
    assert dedup.accept(make_candidate(name="shop-app"))
