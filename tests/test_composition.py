import pytest

from cube_reporter.composition import Link, load_compositions, parse_compositions
from cube_reporter.errors import CompositionError

CUBE_YAML = """
tomcat:
  image: tutum/tomcat:7.0
  links:
    - db:database
    - cache
  networkMode: front
db:
  image: postgres
  networks: [back, front]
manual_box:
  image: busybox
  manual: true
networks:
  back:
    driver: bridge
"""

COMPOSE_YAML = """
version: "3"
services:
  web:
    image: nginx
    links: ["api:backend"]
    network_mode: host
  api:
    image: app
    networks:
      internal: {}
networks:
  internal: {}
"""


def test_cube_format_is_parsed(tmp_path) -> None:
    path = tmp_path / "cube.yml"
    path.write_text(CUBE_YAML, encoding="utf-8")

    compositions = load_compositions(path)

    assert list(compositions) == ["tomcat", "db", "manual_box"]
    tomcat = compositions.get("tomcat")
    assert tomcat.image == "tutum/tomcat:7.0"
    assert tomcat.links == (Link("db", "database"), Link("cache", "cache"))
    assert tomcat.network_mode == "front"
    assert compositions.get("db").networks == ("back", "front")
    assert compositions.get("manual_box").manual is True
    assert compositions.automatic_ids() == ["tomcat", "db"]


def test_compose_format_is_parsed(tmp_path) -> None:
    path = tmp_path / "docker-compose.yml"
    path.write_text(COMPOSE_YAML, encoding="utf-8")

    compositions = load_compositions(path)

    assert list(compositions) == ["web", "api"]
    assert compositions.get("web").network_mode == "host"
    assert compositions.get("web").links == (Link("api", "backend"),)
    assert compositions.get("api").networks == ("internal",)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("db:database", Link("db", "database")), ("db", Link("db", "db")), (" db : x ", Link("db", "x"))],
)
def test_link_parse(raw, expected) -> None:
    assert Link.parse(raw) == expected


@pytest.mark.parametrize("raw", ["", ":alias", "name:"])
def test_link_parse_rejects_invalid(raw) -> None:
    with pytest.raises(CompositionError):
        Link.parse(raw)


def test_missing_composition_file(tmp_path) -> None:
    missing = tmp_path / "missing.yml"

    with pytest.raises(CompositionError) as exc:
        load_compositions(missing)

    assert "Composition file not found" in str(exc.value)


def test_non_mapping_composition_is_rejected() -> None:
    with pytest.raises(CompositionError):
        parse_compositions(["web", "db"])


def test_invalid_yaml_is_reported(tmp_path) -> None:
    path = tmp_path / "broken.yml"
    path.write_text("web: [unclosed\n", encoding="utf-8")

    with pytest.raises(CompositionError) as exc:
        load_compositions(path)

    assert "Invalid YAML" in str(exc.value)


def test_empty_payload_gives_empty_compositions() -> None:
    assert len(parse_compositions(None)) == 0
