import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from wp_migrator.cli import build_parser, build_registry, handler_method_name, main
from wp_migrator.commands.base import BaseCommand, is_truthy
from wp_migrator.commands.post_migration import PostMigration
from wp_migrator.config import get_site, load_config
from wp_migrator.utils.errors import CommandError


def test_every_registration_has_its_handler_method():
    registry = build_registry()
    pairs = {(r.command, r.subcommand) for r in registry}
    assert ("migrate", "external-posts") in pairs
    assert ("yoast-posts", "import") in pairs
    assert ("test", "post-exist") in pairs
    for entry in registry:
        assert issubclass(entry.handler, BaseCommand)
        assert callable(getattr(entry.handler, handler_method_name(entry.subcommand)))


def test_handler_method_name():
    assert handler_method_name("external-posts") == "external_posts"
    assert handler_method_name("import") == "import_"
    assert handler_method_name("posts") == "posts"


def test_parser_collects_global_and_command_options():
    args = build_parser().parse_args(
        ["migrate", "posts", "--from-site", "a", "--to-site", "b", "--dry-run=false", "--batch-size", "5"]
    )
    assert args.handler is PostMigration
    assert args.subcommand == "posts"
    assert (args.from_site, args.to_site) == ("a", "b")
    assert args.dry_run == "false"
    assert args.batch_size == 5

    bare = build_parser().parse_args(["migrate", "posts", "--from-site", "a", "--to-site", "b", "--dry-run"])
    assert bare.dry_run == ""


def test_parser_requires_subcommand():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["migrate"])


@pytest.mark.parametrize(
    "value, expected",
    [("", True), ("yes", True), ("TRUE", True), ("1", True), ("false", False), ("no", False), ("0", False)],
)
def test_dry_run_truthiness(value, expected):
    assert is_truthy(value) is expected


def test_main_returns_one_on_command_error(capsys):
    code = main(["yoast-posts", "import", "--file", "missing.csv", "--config", "absent.json"])
    assert code == 1
    assert "[ERROR] The file does not exist." in capsys.readouterr().out


def test_main_runs_smoke_command(capsys):
    assert main(["test", "update-test", "--config", "absent.json"]) == 0
    out = capsys.readouterr().out
    assert "[INFO] Test Started!" in out
    assert "[SUCCESS] Test Completed!!!" in out


def test_load_config_fills_defaults(monkeypatch):
    monkeypatch.setenv("WP_BASE_URL", "https://env.example")
    config = load_config("absent.json")
    assert config["wordpress"]["base_url"] == "https://env.example"
    assert config["migration"]["dry_run"] is True
    assert config["migration"]["batch_size"] == 60
    assert config["resources"]["ajax_url"] == ""


def test_get_site_merges_transport_settings():
    config = load_config(None, {"wordpress": {"timeout": 9}, "sites": {"main": {"base_url": "https://m.example"}}})
    site = get_site(config, "main")
    assert site["base_url"] == "https://m.example"
    assert site["timeout"] == 9
    with pytest.raises(CommandError):
        get_site(config, "other")
