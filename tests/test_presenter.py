import pytest

from eos_upror.presenter import format_result, present


@pytest.mark.parametrize(
    ("probability", "expected"),
    [(0.0, "0%"), (1.0, "100%"), (0.27, "27%"), (0.274, "27%"), (0.275, "28%"), (0.005, "1%"), (1.2, "120%")],
)
def test_present(probability, expected):
    assert present(probability) == expected


def test_format_result():
    assert format_result(0.27) == "Predicted UPROR Risk: 27%"
