"""Tests for the element tree and hierarchy snapshot."""

import dataclasses

import pytest

from errors import IndexOutOfRangeError, MalformedHierarchyError
from models import DisplayInfo, Element, Hierarchy, Rect, Window


class TestRect:

    def test_dimensions(self):
        rect = Rect(10, 20, 110, 70)
        assert rect.width == 100
        assert rect.height == 50
        assert not rect.is_empty

    def test_short_string(self):
        assert Rect(0, 1, 2, 3).to_short_string() == "[0,1][2,3]"

    def test_contains(self):
        outer = Rect(0, 0, 100, 100)
        assert outer.contains(Rect(10, 10, 50, 50))
        assert not outer.contains(Rect(90, 90, 110, 110))
        assert not Rect(0, 0, 0, 0).contains(Rect(0, 0, 0, 0))


class TestElement:

    def test_child_navigation(self, element_factory, hierarchy_factory):
        first = element_factory(text="first")
        second = element_factory(text="second")
        root = element_factory(children=[first, second])
        hierarchy_factory(root)

        assert root.child_count() == 2
        assert root.child_at(1) is second
        assert first.parent is root
        assert root.parent is None
        assert list(second.ancestors()) == [root]

    @pytest.mark.parametrize("index", [-1, 2])
    def test_child_at_out_of_range(self, element_factory, index):
        root = element_factory(children=[element_factory(), element_factory()])
        with pytest.raises(IndexOutOfRangeError):
            root.child_at(index)

    def test_self_and_descendants_is_preorder(self, element_factory):
        leaf_a = element_factory(element_id=3)
        middle = element_factory(element_id=2, children=[leaf_a])
        leaf_b = element_factory(element_id=4)
        root = element_factory(element_id=1, children=[middle, leaf_b])
        assert [e.element_id for e in root.self_and_descendants()] == [1, 2, 3, 4]

    def test_elements_are_immutable(self, element_factory):
        element = element_factory(text="OK")
        with pytest.raises(dataclasses.FrozenInstanceError):
            element.text = "Cancel"

    def test_class_name_matches_simple_name(self, element_factory):
        element = element_factory(class_name="android.widget.ImageButton")
        assert element.class_name_endswith("ImageButton")
        assert not element.class_name_endswith("Button")

    def test_unbuilt_element_has_no_parent(self, element_factory):
        child = element_factory()
        element_factory(children=[child])
        assert child.parent is None
        assert child.hierarchy is None


class TestHierarchyBuild:

    def test_indexes_every_window(self, element_factory):
        app_root = element_factory(children=[element_factory()])
        ime_root = element_factory()
        hierarchy = Hierarchy.build([
            Window(window_id=0, root=app_root, active=True),
            Window(window_id=1, root=ime_root, window_type="input_method"),
        ])

        assert len(hierarchy) == 3
        assert hierarchy.active_window.root is app_root
        assert hierarchy.element_by_id(ime_root.element_id) is ime_root
        assert hierarchy.window_of(ime_root).window_type == "input_method"
        assert [e.element_id for e in hierarchy.all_elements()] == [
            app_root.element_id, app_root.children[0].element_id, ime_root.element_id]

    def test_requires_a_window(self):
        with pytest.raises(MalformedHierarchyError):
            Hierarchy.build([])

    @pytest.mark.parametrize("active_flags", [(False, False), (True, True)])
    def test_requires_exactly_one_active_window(self, element_factory, active_flags):
        windows = [Window(window_id=i, root=element_factory(), active=flag)
                   for i, flag in enumerate(active_flags)]
        with pytest.raises(MalformedHierarchyError):
            Hierarchy.build(windows)

    def test_rejects_shared_node(self, element_factory):
        shared = element_factory()
        root = element_factory(children=[shared, shared])
        with pytest.raises(MalformedHierarchyError):
            Hierarchy.build([Window(window_id=0, root=root, active=True)])

    def test_rejects_duplicate_ids(self, element_factory):
        root = element_factory(element_id=7, children=[element_factory(element_id=7)])
        with pytest.raises(MalformedHierarchyError):
            Hierarchy.build([Window(window_id=0, root=root, active=True)])

    def test_rejects_inverted_bounds(self, element_factory):
        root = element_factory(bounds=Rect(100, 100, 50, 200))
        with pytest.raises(MalformedHierarchyError):
            Hierarchy.build([Window(window_id=0, root=root, active=True)])

    @pytest.mark.parametrize("display", [
        DisplayInfo(density=0),
        DisplayInfo(density=-2.0),
        DisplayInfo(width_px=-1080, height_px=1920),
        DisplayInfo(width_px=1080, height_px=0),
    ])
    def test_rejects_invalid_display(self, element_factory, display):
        with pytest.raises(MalformedHierarchyError):
            Hierarchy.build([Window(window_id=0, root=element_factory(), active=True)], display)

    def test_rejects_elements_of_another_live_hierarchy(self, element_factory):
        child = element_factory()
        root = element_factory(children=[child])
        first = Hierarchy.build([Window(window_id=0, root=root, active=True)])

        with pytest.raises(MalformedHierarchyError, match="another hierarchy"):
            Hierarchy.build([Window(window_id=0, root=root, active=True)])
        assert child.hierarchy is first
        assert child.parent is root

    def test_partial_reuse_leaves_first_snapshot_intact(self, element_factory):
        shared = element_factory()
        first = Hierarchy.build([Window(window_id=0, root=element_factory(children=[shared]),
                                        active=True)])
        fresh_root = element_factory(children=[shared])

        with pytest.raises(MalformedHierarchyError):
            Hierarchy.build([Window(window_id=0, root=fresh_root, active=True)])
        assert fresh_root.hierarchy is None
        assert shared.hierarchy is first

    def test_display_defaults(self, element_factory):
        hierarchy = Hierarchy.build([Window(window_id=0, root=element_factory(), active=True)])
        assert hierarchy.display == DisplayInfo()
        assert hierarchy.locale == "en"

    def test_px_to_dp_rounds(self):
        assert DisplayInfo(density=2.625).px_to_dp(126) == 48
