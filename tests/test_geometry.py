import pytest

from motiontrack.perception.tracking.geometry import box_center, iou, iou_matrix, xywh_to_xyxy


def test_iou_identical_box_is_one():
    assert iou([10, 20, 30, 40], [10, 20, 30, 40]) == 1.0


def test_iou_is_symmetric():
    a, b = [0, 0, 40, 30], [10, 5, 50, 50]
    assert iou(a, b) == iou(b, a)


def test_iou_disjoint_boxes_is_zero():
    assert iou([0, 0, 10, 10], [20, 20, 10, 10]) == 0.0


def test_iou_touching_edges_is_zero():
    assert iou([0, 0, 10, 10], [10, 0, 10, 10]) == 0.0


def test_iou_partial_overlap():
    # intersection 2500, union 17500
    assert iou([0, 0, 100, 100], [50, 50, 100, 100]) == pytest.approx(2500 / 17500)


def test_iou_negative_size_box_does_not_raise():
    assert iou([0, 0, -10, -10], [0, 0, 10, 10]) == 0.0
    assert iou([0, 0, 0, 0], [0, 0, 0, 0]) == 0.0


def test_iou_matrix_matches_scalar_iou():
    a = [[0, 0, 100, 100], [0, 0, 50, 50]]
    b = [[50, 50, 100, 100], [0, 0, 50, 50], [300, 300, 5, 5]]
    m = iou_matrix(a, b)
    assert m.shape == (2, 3)
    for i, box_a in enumerate(a):
        for j, box_b in enumerate(b):
            assert m[i, j] == pytest.approx(iou(box_a, box_b))


def test_iou_matrix_empty_inputs():
    assert iou_matrix([], [[0, 0, 1, 1]]).shape == (0, 1)


def test_box_helpers():
    assert xywh_to_xyxy((5, 5, 10, 20)) == (5.0, 5.0, 15.0, 25.0)
    assert box_center((0, 0, 50, 50)) == (25.0, 25.0)
