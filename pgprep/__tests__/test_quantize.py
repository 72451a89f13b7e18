import pytest

from pgprep.quantize import binary_round, parse_quantity, round_memory_settings

KB = 1024
MB = 1024**2
GB = 1024**3


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, "0"),
        (1, "1"),
        (15, "15"),
        (16, "16"),
        (1000, "960"),
        (1024, "1kB"),
        (1025, "1kB"),
        (1536, "1536"),
        (2048, "2kB"),
        (12 * MB, "12MB"),
        # 4 significant bits times a power of 2^20 comes back without loss
        (15 * 64 * MB, "960MB"),
        (1_000_000_000, "896MB"),
        (GB, "1GB"),
        (24 * GB, "24GB"),
        (100 * GB, "96GB"),
    ],
)
def test_binary_round(value: int, expected: str) -> None:
    assert binary_round(value) == expected


def test_binary_round_negative() -> None:
    with pytest.raises(ValueError):
        binary_round(-1)


@pytest.mark.parametrize(
    "value",
    [*range(0, 5000, 7), 123456789, 987654321, 4 * GB + 1, 17 * GB - 1, 2**45 + 12345],
)
def test_binary_round_truncation_bound(value: int) -> None:
    """The rendered value never exceeds the input and keeps more than 8/9 of it"""
    rendered = parse_quantity(binary_round(value))
    assert rendered <= value
    assert rendered * 9 >= value * 8


@pytest.mark.parametrize(
    "text,expected",
    [
        ("15", 15),
        ("12kB", 12 * KB),
        ("96MB", 96 * MB),
        ("2GB", 2 * GB),
        ("1TB", 1024 * GB),
        (" 8 MB ", 8 * MB),
    ],
)
def test_parse_quantity(text: str, expected: int) -> None:
    assert parse_quantity(text) == expected


@pytest.mark.parametrize("text", ["", "MB", "12mb", "1.5GB", "-4kB"])
def test_parse_quantity_invalid(text: str) -> None:
    with pytest.raises(ValueError):
        parse_quantity(text)


def test_round_memory_settings() -> None:
    assert round_memory_settings(
        {
            "shared_buffers": 4 * GB,
            "effective_cache_size": 12 * GB,
            "work_mem": 20 * MB + 12345,
            "wal_buffers": 16 * MB,
        }
    ) == {
        "shared_buffers": "4GB",
        "effective_cache_size": "12GB",
        "work_mem": "20MB",
        "wal_buffers": "16MB",
    }


def test_round_memory_settings_rejects_unknown_keys() -> None:
    with pytest.raises(KeyError):
        round_memory_settings({"shared_buffers": GB, "max_connections": 100})
