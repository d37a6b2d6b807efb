import logging
import threading

from ring_director.background import BackgroundWriter


def test_jobs_run_in_order():
    writer = BackgroundWriter()
    seen = []
    for i in range(20):
        writer.submit("job", seen.append, i)
    writer.close()
    assert seen == list(range(20))


def test_submit_does_not_wait():
    writer = BackgroundWriter()
    gate = threading.Event()
    future = writer.submit("slow", gate.wait, 5)
    assert not future.done()
    gate.set()
    writer.close()
    assert future.done()


def test_failed_job_is_logged_and_dropped(caplog):
    def boom():
        raise OSError("disk full")

    writer = BackgroundWriter()
    seen = []
    with caplog.at_level(logging.WARNING, logger="ring_director.background"):
        writer.submit("snapshot", boom)
        writer.submit("after", seen.append, "ok")
        writer.close()
    assert seen == ["ok"]
    assert "background snapshot failed: disk full" in caplog.text


def test_closed_writer_drops_jobs(caplog):
    writer = BackgroundWriter()
    writer.close()
    with caplog.at_level(logging.WARNING, logger="ring_director.background"):
        assert writer.submit("late", print) is None
    assert "dropping late" in caplog.text


def test_close_is_idempotent():
    writer = BackgroundWriter()
    writer.close()
    writer.close()
