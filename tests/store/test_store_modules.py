"""Tests for the supporting store modules: annotations, drafts, groups,
session, frames, selection, sidebar panels and defaults."""

import pytest

from marginalia.models import DraftChanges, Frame, Group, Profile
from marginalia.store import create_sidebar_store
from tests.fixtures import make_annotation, make_saved_annotation


@pytest.fixture
def store():
    return create_sidebar_store()


class TestAnnotations:
    def test_add_and_find(self, store):
        saved = make_saved_annotation("ann-1")
        new = make_annotation(**{"$tag": "t1"})
        store.add_annotations([saved, new])
        assert store.find_annotation_by_id("ann-1") == saved
        assert store.find_annotation_by_tag("t1") == new
        assert store.find_annotation_by_id("missing") is None

    def test_add_replaces_by_tag(self, store):
        store.add_annotations([make_annotation(**{"$tag": "t1", "text": "old"})])
        store.add_annotations([make_annotation(**{"$tag": "t1", "text": "new"})])
        annotations = store.all_annotations()
        assert len(annotations) == 1
        assert annotations[0].text == "new"

    def test_add_replaces_by_id(self, store):
        store.add_annotations([make_saved_annotation("ann-1", text="old")])
        store.add_annotations([make_saved_annotation("ann-1", text="new")])
        assert [a.text for a in store.all_annotations()] == ["new"]

    def test_remove(self, store):
        keep = make_annotation(**{"$tag": "keep"})
        drop = make_annotation(**{"$tag": "drop"})
        store.add_annotations([keep, drop])
        store.remove_annotations([drop])
        assert store.all_annotations() == [keep]

    def test_update_flag_status(self, store):
        store.add_annotations([make_saved_annotation("ann-1"), make_saved_annotation("ann-2")])
        store.update_flag_status("ann-1", True)
        assert store.find_annotation_by_id("ann-1").flagged
        assert not store.find_annotation_by_id("ann-2").flagged


class TestDrafts:
    def test_create_and_get(self, store):
        annotation = make_annotation(**{"$tag": "t1"})
        store.create_draft(annotation, DraftChanges(text="hello", tags=["a"], is_private=True))
        draft = store.get_draft(annotation)
        assert draft is not None
        assert (draft.text, draft.tags, draft.is_private) == ("hello", ["a"], True)

    def test_create_replaces_existing_draft(self, store):
        annotation = make_annotation(**{"$tag": "t1"})
        store.create_draft(annotation, DraftChanges(text="first"))
        store.create_draft(annotation, DraftChanges(text="second"))
        assert store.count_drafts() == 1
        assert store.get_draft(annotation).text == "second"

    def test_remove(self, store):
        annotation = make_annotation(**{"$tag": "t1"})
        store.create_draft(annotation, DraftChanges(text="hello"))
        store.remove_draft(annotation)
        assert store.get_draft(annotation) is None

    def test_delete_new_and_empty_drafts(self, store):
        empty_new = make_annotation(**{"$tag": "empty"})
        filled_new = make_annotation(**{"$tag": "filled"})
        empty_saved = make_saved_annotation("ann-1")
        store.add_annotations([empty_new, filled_new, empty_saved])
        store.create_draft(empty_new, DraftChanges())
        store.create_draft(filled_new, DraftChanges(text="keep me"))
        store.create_draft(empty_saved, DraftChanges())

        store.delete_new_and_empty_drafts()

        assert store.get_draft(empty_new) is None
        assert store.find_annotation_by_tag("empty") is None
        assert store.get_draft(filled_new) is not None
        assert store.get_draft(empty_saved) is not None
        assert store.find_annotation_by_id("ann-1") is not None

    def test_delete_new_and_empty_drafts_notifies_once(self, store):
        """Subscribers see the draft and its annotation disappear together."""
        annotation = make_annotation(**{"$tag": "empty"})
        store.add_annotations([annotation])
        store.create_draft(annotation, DraftChanges())
        seen = []
        store.subscribe(lambda: seen.append(
            (store.count_drafts(), store.find_annotation_by_tag("empty") is not None)
        ))

        store.delete_new_and_empty_drafts()

        assert seen == [(0, False)]

    def test_draft_with_tags_is_not_empty(self, store):
        annotation = make_annotation(**{"$tag": "t1"})
        store.add_annotations([annotation])
        store.create_draft(annotation, DraftChanges(tags=["todo"]))
        store.delete_new_and_empty_drafts()
        assert store.find_annotation_by_tag("t1") is not None


class TestGroups:
    def test_focus_loaded_group(self, store):
        store.load_groups([Group(id="g1", name="One"), Group(id="g2", name="Two")])
        store.focus_group("g2")
        assert store.focused_group_id() == "g2"
        assert store.focused_group().name == "Two"

    def test_focus_unknown_group_is_ignored(self, store):
        store.load_groups([Group(id="g1", name="One")])
        store.focus_group("g1")
        store.focus_group("nope")
        assert store.focused_group_id() == "g1"

    def test_reloading_without_focused_group_clears_focus(self, store):
        store.load_groups([Group(id="g1", name="One")])
        store.focus_group("g1")
        store.load_groups([Group(id="g2", name="Two")])
        assert store.focused_group_id() is None


class TestSession:
    def test_login_and_logout(self, store):
        assert not store.is_logged_in()
        store.set_profile(Profile(public_key_hex="abc", display_name="Bob"))
        assert store.is_logged_in()
        assert store.get_profile().public_key_hex == "abc"
        store.logout()
        assert store.get_profile() is None


class TestFrames:
    def test_main_frame_has_no_id(self, store):
        store.connect_frame(Frame(id="child", uri="https://example.com/embed"))
        assert store.main_frame() is None
        store.connect_frame(Frame(uri="https://example.com/"))
        assert store.main_frame().uri == "https://example.com/"
        assert len(store.frames()) == 2

    def test_destroy_frame(self, store):
        frame = Frame(uri="https://example.com/")
        store.connect_frame(frame)
        store.destroy_frame(frame)
        assert store.main_frame() is None


class TestSelection:
    def test_select_tab(self, store):
        store.select_tab("note")
        assert store.selected_tab() == "note"

    def test_unknown_tab_is_ignored(self, store):
        store.select_tab("note")
        store.select_tab("bogus")
        assert store.selected_tab() == "note"

    def test_set_expanded(self, store):
        store.set_expanded("ann-1", True)
        store.set_expanded("ann-2", False)
        assert store.expanded_map() == {"ann-1": True, "ann-2": False}


class TestSidebarPanels:
    def test_open_and_close(self, store):
        store.open_sidebar_panel("loginPrompt")
        assert store.is_sidebar_panel_open("loginPrompt")
        store.close_sidebar_panel("other")
        assert store.active_panel_name() == "loginPrompt"
        store.close_sidebar_panel("loginPrompt")
        assert store.active_panel_name() is None


class TestDefaults:
    def test_initial_privacy_is_shared(self, store):
        assert store.get_default("annotationPrivacy") == "shared"

    def test_set_default(self, store):
        store.set_default("annotationPrivacy", "private")
        assert store.get_defaults()["annotationPrivacy"] == "private"
