"""
Test the `maildir-tools` command line.
"""
# System imports
#
import sys

# 3rd party imports
#
import pytest

# Project imports
#
from ..constants import DEFAULT_MESSAGE_TEMPLATE
from ..maildir_tools import get_option, main

ENV_VARS = (
    "MAILDIR_PREFIX",
    "MAILDIRS_FORMAT",
    "MESSAGES_FORMAT",
    "MESSAGE_TEMPLATE",
    "UNREAD_POLICY",
    "UNREAD_HIGHLIGHT",
    "WORKERS",
    "LOG_CONFIG",
    "DEBUG",
    "SENTRY_DSN",
)


####################################################################
#
@pytest.fixture
def run_cli(monkeypatch, mocker, tmp_path):
    """
    Returns a function that runs `main()` with the given arguments and
    returns its exit status. Logging and sentry setup are mocked out so
    they do not leak in to other tests.
    """
    for env_var in ENV_VARS:
        monkeypatch.delenv(env_var, raising=False)

    # load_dotenv() reads `.env` from the current directory.
    #
    monkeypatch.chdir(tmp_path)
    mocker.patch("mdtools.maildir_tools.setup_logging")
    mocker.patch("mdtools.maildir_tools.setup_asyncio_logging")
    mocker.patch("mdtools.maildir_tools.setup_sentry")

    def run(*args: str) -> int:
        monkeypatch.setattr(sys, "argv", ["maildir-tools", *args])
        with pytest.raises(SystemExit) as exc_info:
            main()
        return exc_info.value.code

    return run


####################################################################
#
@pytest.fixture
def mail_store(maildir_root, maildir_factory, deliver):
    inbox = maildir_factory("inbox")
    deliver(inbox, "cur", flags="S", subject="First", mtime=1000)
    deliver(inbox, "new", subject="Second", mtime=2000)
    maildir_factory("archive")
    return maildir_root


####################################################################
#
def test_get_option(monkeypatch):
    monkeypatch.setenv("MAILDIRS_FORMAT", "#{name}")
    args = {"--format": None, "--prefix": "/tmp/mail"}
    assert get_option(args, "--format", "MAILDIRS_FORMAT", "x") == "#{name}"
    assert get_option(args, "--prefix", "MAILDIR_PREFIX", "x") == "/tmp/mail"
    assert get_option(args, "--missing", "NOT_A_REAL_VAR_ANYWHERE", "x") == "x"


####################################################################
#
def test_maildirs(run_cli, mail_store, capsys):
    status = run_cli(
        "maildirs", f"--prefix={mail_store}", "--short", "--format=#{name}"
    )
    assert status == 0
    assert capsys.readouterr().out.splitlines() == ["archive", "inbox"]


####################################################################
#
def test_maildirs_unread(run_cli, mail_store, capsys):
    status = run_cli("maildirs", f"--prefix={mail_store}", "--short", "--unread")
    assert status == 0
    assert capsys.readouterr().out.splitlines() == ["000001/000002 - inbox"]


####################################################################
#
def test_maildirs_prefix_from_env(run_cli, mail_store, capsys, monkeypatch):
    monkeypatch.setenv("MAILDIR_PREFIX", str(mail_store))
    monkeypatch.setenv("MAILDIRS_FORMAT", "#{shortname}:#{total}")
    assert run_cli("maildirs") == 0
    assert capsys.readouterr().out.splitlines() == ["archive:0", "inbox:2"]


####################################################################
#
def test_maildirs_bad_unread_policy(run_cli, mail_store, capsys):
    status = run_cli(
        "maildirs", f"--prefix={mail_store}", "--unread-policy=sometimes"
    )
    assert status == 1
    assert "Unknown unread policy 'sometimes'" in capsys.readouterr().err


####################################################################
#
def test_messages(run_cli, mail_store, capsys):
    status = run_cli(
        "messages",
        f"--prefix={mail_store}",
        "--format=#{index}/#{total} #{flags} #{subject}",
        "--workers=2",
        "inbox",
    )
    assert status == 0
    assert capsys.readouterr().out.splitlines() == [
        "1/2 S First",
        "2/2 N Second",
    ]


####################################################################
#
def test_messages_not_found(run_cli, mail_store, capsys):
    status = run_cli("messages", f"--prefix={mail_store}", "no-such-folder")
    assert status == 1
    assert "maildir wasn't found" in capsys.readouterr().err


####################################################################
#
@pytest.mark.parametrize("workers", ["lots", "0", "-3"])
def test_messages_bad_workers(run_cli, mail_store, capsys, workers):
    status = run_cli(
        "messages", f"--prefix={mail_store}", f"--workers={workers}", "inbox"
    )
    assert status == 1
    assert "Invalid number of workers" in capsys.readouterr().err


####################################################################
#
def test_message(run_cli, maildir_factory, deliver, capsys, tmp_path):
    inbox = maildir_factory("inbox")
    msg_path = deliver(
        inbox, subject="Lunch?", body="Tacos at noon.", html=False
    )
    template = tmp_path / "template.txt"
    template.write_text("#{subject}: #{body}")

    assert run_cli("message", f"--template={template}", msg_path) == 0
    assert capsys.readouterr().out.strip() == "Lunch?: Tacos at noon."


####################################################################
#
def test_message_missing_file(run_cli, tmp_path, capsys):
    status = run_cli("message", str(tmp_path / "nope"))
    assert status == 1
    assert "nope" in capsys.readouterr().err


####################################################################
#
def test_dump_template(run_cli, capsys):
    assert run_cli("message", "--dump-template") == 0
    assert capsys.readouterr().out == DEFAULT_MESSAGE_TEMPLATE + "\n"


####################################################################
#
def test_message_unread_highlight(
    run_cli, maildir_factory, deliver, capsys, tmp_path, monkeypatch
):
    """
    The single message view honours `UNREAD_HIGHLIGHT` and the unread
    policy just like the listings do.
    """
    inbox = maildir_factory("inbox")
    fresh = deliver(inbox, "new", subject="fresh")
    replied = deliver(inbox, "cur", flags="R", subject="replied")
    template = tmp_path / "template.txt"
    template.write_text("#{unread_highlight}#{subject}")
    monkeypatch.setenv("UNREAD_HIGHLIGHT", ">> ")

    assert run_cli("message", f"--template={template}", fresh, replied) == 0
    assert capsys.readouterr().out.splitlines() == [">> fresh", "replied"]

    status = run_cli(
        "message",
        f"--template={template}",
        "--unread-policy=seen-flag",
        replied,
    )
    assert status == 0
    assert capsys.readouterr().out.splitlines() == [">> replied"]
