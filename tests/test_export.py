import csv

import yaml

from proxybench.bench.models import Result
from proxybench.directory import ProxyDirectory
from proxybench.export import CSV_HEADER, UTF8_BOM, select_configs, write_csv, write_yaml
from proxybench.ranking import rank

MIB = 1024 * 1024


def _directory(tmp_path, sample_config_yaml) -> ProxyDirectory:
    path = tmp_path / "config.yaml"
    path.write_text(sample_config_yaml, encoding="utf-8")
    return ProxyDirectory.from_sources(str(path))


def _results():
    return rank(
        [
            Result(name="HK http", bandwidth=2 * MIB, ttfb=0.1234),
            Result(name="\U0001F1EF\U0001F1F5 Tokyo  01", bandwidth=5 * MIB, ttfb=0.05),
            Result.unavailable("SS good"),
        ],
        "b",
    )


def test_select_configs_applies_threshold_and_skips_unavailable(tmp_path, sample_config_yaml):
    directory = _directory(tmp_path, sample_config_yaml)

    configs = select_configs(_results(), directory, threshold=3 * MIB)

    assert [c["name"] for c in configs] == ["\U0001F1EF\U0001F1F5 Tokyo  01"]


def test_select_configs_skips_names_without_config(tmp_path, sample_config_yaml):
    directory = _directory(tmp_path, sample_config_yaml)

    configs = select_configs([Result(name="ghost", bandwidth=10.0, ttfb=0.1)], directory, threshold=-0.1)

    assert configs == []


def test_write_yaml_round_trips_through_directory(tmp_path, sample_config_yaml):
    directory = _directory(tmp_path, sample_config_yaml)
    target = tmp_path / "result.yaml"

    write_yaml(target, _results(), directory, threshold=-0.1)

    text = target.read_text(encoding="utf-8")
    assert "\U0001F1EF\U0001F1F5 Tokyo  01" in text
    exported = yaml.safe_load(text)
    assert [entry["name"] for entry in exported] == ["\U0001F1EF\U0001F1F5 Tokyo  01", "HK http"]
    assert exported[1]["password"] == "secret"

    reloaded = ProxyDirectory.from_sources(str(target))
    assert reloaded.all_names() == {"\U0001F1EF\U0001F1F5 Tokyo  01", "HK http"}
    assert reloaded.raw_config("HK http") == directory.raw_config("HK http")


def test_write_csv_has_bom_header_and_rows(tmp_path):
    target = tmp_path / "result.csv"

    write_csv(target, _results())

    raw = target.read_text(encoding="utf-8")
    assert raw.startswith(UTF8_BOM)
    rows = list(csv.reader(raw[len(UTF8_BOM):].splitlines()))
    assert tuple(rows[0]) == CSV_HEADER
    assert rows[1] == ["\U0001F1EF\U0001F1F5 Tokyo  01", "5.00", "50"]
    assert rows[2] == ["HK http", "2.00", "123"]
    assert rows[3] == ["SS good", "N/A", "N/A"]


def test_write_yaml_keeps_provider_prefixed_names(tmp_path):
    main = tmp_path / "main.yaml"
    main.write_text(
        yaml.safe_dump(
            {
                "proxies": [{"name": "p1", "type": "socks5", "server": "1.1.1.1", "port": 1080}],
                "proxy-providers": {
                    "embedded": {
                        "type": "inline",
                        "payload": [{"name": "p1", "type": "socks5", "server": "2.2.2.2", "port": 1080}],
                    },
                },
            }
        ),
        encoding="utf-8",
    )
    directory = ProxyDirectory.from_sources(str(main))
    results = [
        Result(name="[embedded] p1", bandwidth=2 * MIB, ttfb=0.1),
        Result(name="p1", bandwidth=MIB, ttfb=0.2),
    ]
    target = tmp_path / "result.yaml"

    write_yaml(target, results, directory, threshold=-0.1)

    reloaded = ProxyDirectory.from_sources(str(target))
    assert reloaded.all_names() == {"[embedded] p1", "p1"}
    assert reloaded.raw_config("[embedded] p1")["server"] == "2.2.2.2"
    assert reloaded.raw_config("p1")["server"] == "1.1.1.1"
    assert directory.raw_config("[embedded] p1")["name"] == "p1"
