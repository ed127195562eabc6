import pytest

from thumbnail_editor.elements import create_circle, create_rect, create_text
from thumbnail_editor.scene import Scene


@pytest.fixture
def scene():
    s = Scene()
    for _ in range(4):
        s.add(create_rect({"fill": "#000"}), select=False)
    return s


def test_add_appends_on_top_and_selects():
    s = Scene()
    first = s.add(create_rect())
    second = s.add(create_circle())
    assert s.ids() == [first, second]
    assert s.selected_id == second


def test_duplicate_id_is_rejected():
    s = Scene()
    r = create_rect()
    s.add(r)
    with pytest.raises(ValueError):
        s.add(r)


def test_bring_to_front_moves_only_target(scene):
    a, b, c, d = scene.ids()
    assert scene.bring_to_front(b)
    assert scene.ids() == [a, c, d, b]


def test_send_to_back_moves_only_target(scene):
    a, b, c, d = scene.ids()
    assert scene.send_to_back(c)
    assert scene.ids() == [c, a, b, d]


def test_front_then_back_is_not_an_inverse(scene):
    a, b, c, d = scene.ids()
    scene.bring_to_front(b)
    scene.send_to_back(b)
    assert scene.ids() == [b, a, c, d]
    assert scene.ids() != [a, b, c, d]


def test_layering_absent_ids_are_noops(scene):
    before = scene.ids()
    assert scene.bring_to_front("missing") is False
    assert scene.send_to_back(None) is False
    assert scene.ids() == before


def test_remove_unknown_id_leaves_scene_unchanged(scene):
    scene.select(scene.ids()[1])
    before = scene.snapshot()
    assert scene.remove("missing") is False
    assert scene.snapshot() == before
    assert scene.selected_id == before[1].id


def test_remove_clears_selection_only_when_selected(scene):
    a, b, c, d = scene.ids()
    scene.select(b)
    scene.remove(c)
    assert scene.selected_id == b
    scene.remove(b)
    assert scene.selected_id is None
    assert scene.ids() == [a, d]


def test_update_and_move():
    s = Scene()
    tid = s.add(create_text())
    s.update(tid, text="HALO DUNIA", fill="#ff0")
    t = s.get(tid)
    assert (t.text, t.fill) == ("HALO DUNIA", "#ffff00")

    s.move(tid, -500, 2000)
    assert (s.get(tid).x, s.get(tid).y) == (-500, 2000)


def test_update_unknown_id_is_noop():
    s = Scene([create_rect()])
    before = s.snapshot()
    assert s.update("missing", width=1) is None
    assert s.move("missing", 1, 1) is None
    assert s.snapshot() == before


def test_invalid_update_leaves_element_untouched():
    s = Scene()
    rid = s.add(create_rect())
    with pytest.raises(ValueError):
        s.update(rid, opacity=2)
    assert s.get(rid).opacity == 0.9


def test_select_unknown_clears_selection():
    s = Scene()
    rid = s.add(create_rect())
    assert s.select("missing") is None
    assert s.select(rid) == rid
    assert s.selected.id == rid


def test_snapshot_is_detached():
    s = Scene()
    rid = s.add(create_rect())
    snap = s.snapshot()
    s.update(rid, width=42)
    assert snap[0].width == 500
