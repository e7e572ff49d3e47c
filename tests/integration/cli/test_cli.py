"""Integration tests for the devsync CLI against a site tree and an in-memory account"""

import json

import pytest
from typer.testing import CliRunner

from devsync.cli.cli import app
from devsync.core.models import RemoteArticle
from devsync.remote.client import DevtoError


runner = CliRunner()


@pytest.fixture(name="client")
def client_fixture(fake_client, article, monkeypatch, tmp_path):
    """Route every DevtoClient the CLI builds to one FakeClient."""
    client = fake_client(
        unpublished=[RemoteArticle(id=7, title="Draft idea", url="https://dev.to/someone/draft-idea")],
        published=[article],
    )
    monkeypatch.setattr("devsync.core.pipeline.DevtoClient", lambda *a, **kw: client)
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEVTO_APIKEY", raising=False)
    monkeypatch.delenv("DEVSYNC_API_KEY", raising=False)
    return client


def _invoke(site_root, *args):
    return runner.invoke(app, ["--root", str(site_root), "--apikey", "k", *args])


def test_missing_api_key(client, site_root):
    result = runner.invoke(app, ["--root", str(site_root), "status"])
    assert result.exit_code == 1
    assert "no API key given" in result.output


def test_status_reports_pending_push(client, site_root):
    result = _invoke(site_root, "status")
    assert result.exit_code == 0, result.output
    assert "info:" in result.output
    assert "will be pushed published to https://dev.to/someone/debug-k8s-2588" in result.output
    assert client.updates == []


def test_preview_prints_document(client, site_root):
    result = _invoke(site_root, "preview", "debug-k8s")
    assert result.exit_code == 0, result.output
    assert result.output.startswith('---\ntitle: "Debug k8s"\n')
    assert 'cover_image: "https://blog.example.com/debug-k8s/cover.png"' in result.output
    assert "![wireshark](https://blog.example.com/debug-k8s/wireshark.png)" in result.output
    assert "See [the intro](#intro)." in result.output


def test_diff_shows_changes(client, site_root):
    result = _invoke(site_root, "diff")
    assert result.exit_code == 0, result.output
    assert "--- devto/101" in result.output
    assert "-old body" in result.output
    assert client.updates == []


def test_push_then_push_again_is_noop(client, site_root):
    """The second push finds the remote body identical and writes nothing."""
    first = _invoke(site_root, "push")
    assert first.exit_code == 0, first.output
    assert "success:" in first.output
    assert len(client.updates) == 1

    second = _invoke(site_root, "push")
    assert second.exit_code == 0, second.output
    assert "no change, skipping" in second.output
    assert len(client.updates) == 1


def test_push_record_url(client, site_root):
    result = runner.invoke(app, ["--root", str(site_root), "--apikey", "k", "--record-url", "push"])
    assert result.exit_code == 0, result.output
    text = (site_root / "content" / "debug-k8s" / "index.md").read_text()
    assert 'devtoUrl: "https://dev.to/someone/debug-k8s-2588"' in text


def test_per_post_error_sets_exit_code(client, site_root):
    """An unmapped post is reported, the batch continues, and the exit code is 1."""
    (site_root / "content" / "aaa.md").write_text("---\ntitle: Draft idea\ndevtoPublished: false\n---\nbody\n")
    result = _invoke(site_root, "status")
    assert result.exit_code == 1
    assert "title matches devtoId 7: https://dev.to/someone/draft-idea/edit" in result.output
    assert "will be pushed published" in result.output


def test_draft_post_is_silent(client, site_root):
    (site_root / "content" / "wip.md").write_text("---\ntitle: WIP\ndraft: true\n---\nbody\n")
    result = _invoke(site_root, "status", "wip")
    assert result.exit_code == 0
    assert result.output == ""


def test_unknown_post(client, site_root):
    result = _invoke(site_root, "status", "nope")
    assert result.exit_code == 1
    assert "wasn't able to find the source file" in result.output


def test_bad_root(client, tmp_path):
    result = _invoke(tmp_path / "missing", "status")
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_listing_failure(client, site_root):
    def boom(page, per_page):
        raise DevtoError("unauthorized", status=401)
    client.list_my_unpublished = boom
    result = _invoke(site_root, "status")
    assert result.exit_code == 1
    assert "listing all the user's articles" in result.output
    assert "unauthorized" in result.output


def test_list(client, site_root):
    result = _invoke(site_root, "list")
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "7: unpublished at https://dev.to/someone/draft-idea/edit (Draft idea)"
    assert lines[1] == "101: published at https://dev.to/someone/debug-k8s-2588 (Debug k8s)"


def test_list_single_article(client, site_root):
    result = _invoke(site_root, "list", "--id", "101")
    assert result.exit_code == 0
    assert result.output.startswith("101: published")


def test_list_single_article_not_found(client, site_root):
    result = _invoke(site_root, "list", "--id", "7")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_json_log_format(client, site_root):
    """--log-format json writes one JSON object per log record."""
    (site_root / "content" / "aaa.md").write_text("---\ntitle: Draft idea\ndevtoPublished: false\n---\nbody\n")
    result = runner.invoke(app, ["--root", str(site_root), "--apikey", "k", "--log-format", "json", "status"])
    assert result.exit_code == 1
    records = [json.loads(line) for line in result.output.splitlines() if line.startswith("{")]
    assert [r["level"] for r in records] == ["ERROR"]
    assert "title matches devtoId 7" in records[0]["message"]
    assert records[0]["logger"] == "devsync.core.reconcile"
