import pytest

from proxybench.formatting import NOT_AVAILABLE, format_bandwidth, format_name, format_ttfb


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (512.0, "512.00B/s"),
        (1024.0, "1.00KB/s"),
        (1_000_000.0, "976.56KB/s"),
        (10 * 1024 * 1024, "10.00MB/s"),
        (3 * 1024 ** 3, "3.00GB/s"),
        (2 * 1024 ** 4, "2.00TB/s"),
        (5 * 1024 ** 5, "5120.00TB/s"),
    ],
)
def test_format_bandwidth_units(value, expected):
    assert format_bandwidth(value) == expected


@pytest.mark.parametrize("value", [None, 0, -1.0])
def test_format_bandwidth_unavailable(value):
    assert format_bandwidth(value) == NOT_AVAILABLE


def test_format_ttfb_in_milliseconds():
    assert format_ttfb(0.1) == "100.00ms"
    assert format_ttfb(0.025) == "25.00ms"
    assert format_ttfb(1.23456) == "1234.56ms"


@pytest.mark.parametrize("value", [None, 0.0])
def test_format_ttfb_unavailable(value):
    assert format_ttfb(value) == NOT_AVAILABLE


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("\U0001F1EF\U0001F1F5 Tokyo  01", "Tokyo 01"),
        ("  HK   \u2708\uFE0F  fast ", "HK fast"),
        ("\U0001F680 Rocket", "Rocket"),
        ("plain-name", "plain-name"),
    ],
)
def test_format_name_strips_emoji_and_collapses_spaces(raw, expected):
    assert format_name(raw) == expected
