import argparse
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
import requests

from wp_migrator.commands.maintenance import RemoveComments, RemoveRevisions, cutoff_date
from wp_migrator.commands.smoke import SmokeTest
from wp_migrator.utils.errors import CommandError

from conftest import FakeStore

CONFIG = {"migration": {"log_file": "migration.log", "max_iterations": 0}}


def _ns(**values):
    values.setdefault("batch_size", None)
    return argparse.Namespace(**values)


def test_cutoff_date_format():
    value = cutoff_date(years=1)
    assert len(value) == 10
    assert value[4] == "-" and value[7] == "-"


def test_remove_revisions_deletes_only_old_ones(store):
    store.posts[1] = {"type": "post", "slug": "p"}
    store.revisions[1] = [
        {"id": 10, "modified_gmt": "2001-01-01T00:00:00"},
        {"id": 11, "modified_gmt": "2999-01-01T00:00:00"},
    ]
    command = RemoveRevisions(CONFIG, store=store)
    command.remove(_ns(year_old=1, post_type="post,page", dry_run="no"))
    assert [r["id"] for r in store.revisions[1]] == [11]


def test_remove_revisions_dry_run_keeps_everything(store):
    store.posts[1] = {"type": "post", "slug": "p"}
    store.revisions[1] = [{"id": 10, "modified_gmt": "2001-01-01T00:00:00"}]
    RemoveRevisions(CONFIG, store=store).remove(_ns(year_old=1, post_type="post", dry_run=None))
    assert len(store.revisions[1]) == 1


def test_remove_comments_walks_every_page(store, capsys):
    store.comments = {i: "hold" for i in range(1, 6)}
    store.comments[9] = "approved"
    RemoveComments(CONFIG, store=store).remove(_ns(month_old=6, dry_run="0", batch_size=2))
    assert store.comments == {9: "approved"}
    assert "Total 5 Comments removed successfully!!!" in capsys.readouterr().out


def test_remove_comments_advances_when_deletes_fail():
    class FailingStore(FakeStore):
        def delete_comment(self, comment_id):
            raise requests.ConnectionError("refused")

    store = FailingStore()
    store.comments = {i: "hold" for i in range(1, 5)}
    RemoveComments(CONFIG, store=store).remove(_ns(month_old=6, dry_run="0", batch_size=2))
    assert len(store.comments) == 4
    assert os.path.exists(os.path.join("reports", "migration", "errors.jsonl"))


def test_remove_comments_rejects_non_positive_age(store):
    with pytest.raises(CommandError):
        RemoveComments(CONFIG, store=store).remove(_ns(month_old=-1, dry_run=None))


def test_post_exist(store):
    store.posts[3] = {"type": "post", "slug": "here", "status": "publish"}
    assert SmokeTest(CONFIG, store=store).post_exist(_ns(slug="here", dry_run=None)) == 0
    with pytest.raises(CommandError):
        SmokeTest(CONFIG, store=store).post_exist(_ns(slug="gone", dry_run=None))
