import pytest

from hand_ocr.core.errors import InvalidInputError
from hand_ocr.core.result import CropRectangle
from hand_ocr.imaging.geometry import full_frame, map_to_source, output_size


def test_maps_display_selection_to_source_pixels() -> None:
    rect = CropRectangle(x=200, y=150, width=1000, height=800, display_width=800, display_height=600)

    mapped = map_to_source(rect, 4000, 3000)

    assert (mapped.x, mapped.y, mapped.width, mapped.height) == (1000, 750, 5000, 4000)
    assert (mapped.display_width, mapped.display_height) == (4000, 3000)
    assert output_size(mapped) == (5000, 4000)


def test_axes_scale_independently() -> None:
    # display stretched horizontally: 2x on x, 4x on y
    rect = CropRectangle(x=10, y=10, width=50, height=20, display_width=100, display_height=50)

    mapped = map_to_source(rect, 200, 200)

    assert (mapped.x, mapped.y, mapped.width, mapped.height) == (20, 40, 100, 80)


def test_offsets_stay_fractional_and_size_is_floored() -> None:
    rect = CropRectangle(x=1, y=1, width=10, height=10, display_width=3, display_height=3)

    mapped = map_to_source(rect, 10, 10)

    assert mapped.x == pytest.approx(10 / 3)
    assert output_size(mapped) == (33, 33)


def test_zero_display_size_is_rejected() -> None:
    rect = CropRectangle(x=0, y=0, width=10, height=10, display_width=0, display_height=0)

    with pytest.raises(InvalidInputError):
        map_to_source(rect, 100, 100)


def test_full_frame_is_a_valid_selection() -> None:
    rect = full_frame(640, 480)
    rect.validate()
    assert rect.box == (0, 0, 640, 480)


@pytest.mark.parametrize(
    "rect",
    [
        CropRectangle(x=0, y=0, width=0, height=10, display_width=100, display_height=100),
        CropRectangle(x=-1, y=0, width=10, height=10, display_width=100, display_height=100),
        CropRectangle(x=95, y=0, width=10, height=10, display_width=100, display_height=100),
        CropRectangle(x=0, y=95, width=10, height=10, display_width=100, display_height=100),
    ],
)
def test_validate_rejects_selections_outside_the_display(rect: CropRectangle) -> None:
    with pytest.raises(InvalidInputError):
        rect.validate()
