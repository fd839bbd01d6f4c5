import json
import threading

import pytest
import redis

from files_manager.application.ports.job_queue import ThumbnailJob
from files_manager.exceptions import JobError, JobQueueFull, StorageError
from files_manager.infrastructure.queue.redis_job_queue import RedisJobQueue
from files_manager.infrastructure.queue.threaded_job_queue import ThreadedJobQueue


def test_threaded_queue_processes_jobs():
    seen = []
    q = ThreadedJobQueue(handler=seen.append, max_workers=2)
    q.start()
    try:
        for i in range(10):
            q.enqueue(ThumbnailJob(user_id=1, file_id=i))
        q.join()
    finally:
        q.close()
    assert sorted(job.file_id for job in seen) == list(range(10))


def test_threaded_queue_contains_handler_errors():
    seen = []

    def handler(job):
        if job.file_id == 1:
            raise JobError("File not found")
        if job.file_id == 2:
            raise RuntimeError("boom")
        seen.append(job.file_id)

    q = ThreadedJobQueue(handler=handler, max_workers=1)
    q.start()
    try:
        for i in range(4):
            q.enqueue(ThumbnailJob(user_id=1, file_id=i))
        q.join()
    finally:
        q.close()
    assert seen == [0, 3]


def test_threaded_queue_refuses_jobs_when_full():
    q = ThreadedJobQueue(handler=lambda job: None, maxsize=2)
    q.enqueue(ThumbnailJob(user_id=1, file_id=1))
    q.enqueue(ThumbnailJob(user_id=1, file_id=2))
    with pytest.raises(JobQueueFull):
        q.enqueue(ThumbnailJob(user_id=1, file_id=3))


class FakeRedis:
    """Just enough of the list commands for the reliable-queue pattern."""

    def __init__(self):
        self.lists = {}
        self.on_empty = None
        self.down = False
        self.blmove_failures = 0
        self.lrem_failures = 0

    def _list(self, name):
        return self.lists.setdefault(name, [])

    def lpush(self, name, value):
        if self.down:
            raise redis.ConnectionError("connection refused")
        self._list(name).insert(0, value)

    def _move(self, src, dst, wherefrom, whereto):
        items = self._list(src)
        if not items:
            return None
        value = items.pop() if wherefrom == "RIGHT" else items.pop(0)
        if whereto == "LEFT":
            self._list(dst).insert(0, value)
        else:
            self._list(dst).append(value)
        return value

    def blmove(self, src, dst, timeout, wherefrom, whereto):
        if self.blmove_failures:
            self.blmove_failures -= 1
            raise redis.ConnectionError("connection reset")
        value = self._move(src, dst, wherefrom, whereto)
        if value is None and self.on_empty:
            self.on_empty()
        return value

    def lmove(self, src, dst, wherefrom, whereto):
        return self._move(src, dst, wherefrom, whereto)

    def lrem(self, name, count, value):
        if self.lrem_failures:
            self.lrem_failures -= 1
            raise redis.ConnectionError("connection reset")
        items = self._list(name)
        if value in items:
            items.remove(value)

    def ping(self):
        if self.down:
            raise redis.ConnectionError("connection refused")
        return True

    def close(self):
        pass


@pytest.fixture
def fake_redis():
    return FakeRedis()


def test_redis_queue_enqueues_json_payload(fake_redis):
    q = RedisJobQueue(client=fake_redis)
    q.enqueue(ThumbnailJob(user_id=1, file_id=9))
    assert [json.loads(raw) for raw in fake_redis.lists["fileQueue"]] == [{"userId": 1, "fileId": 9}]


def test_redis_queue_is_fifo_and_acks(fake_redis):
    q = RedisJobQueue(client=fake_redis)
    q.enqueue(ThumbnailJob(user_id=1, file_id=1))
    q.enqueue(ThumbnailJob(user_id=1, file_id=2))
    raw, job = q.reserve()
    assert job.file_id == 1
    assert fake_redis.lists["fileQueue:processing"] == [raw]
    q.ack(raw)
    assert fake_redis.lists["fileQueue:processing"] == []
    assert q.reserve()[1].file_id == 2
    assert q.reserve() is None


def test_redis_queue_drops_malformed_payloads(fake_redis):
    fake_redis.lpush("fileQueue", "not json")
    fake_redis.lpush("fileQueue", "[1, 2]")
    q = RedisJobQueue(client=fake_redis)
    for _ in range(2):
        with pytest.raises(JobError):
            q.reserve()
    assert fake_redis.lists["fileQueue:processing"] == []


def test_redis_consume_acks_handled_and_failed_jobs(fake_redis):
    stop = threading.Event()
    fake_redis.on_empty = stop.set
    q = RedisJobQueue(client=fake_redis)
    for i in range(3):
        q.enqueue(ThumbnailJob(user_id=1, file_id=i))
    seen = []

    def handler(job):
        if job.file_id == 1:
            raise JobError("File not found")
        seen.append(job.file_id)

    q.consume(handler, stop, timeout=0)
    assert seen == [0, 2]
    assert fake_redis.lists["fileQueue"] == []
    assert fake_redis.lists["fileQueue:processing"] == []


def test_redis_consume_leaves_crashed_job_for_requeue(fake_redis):
    stop = threading.Event()
    fake_redis.on_empty = stop.set
    q = RedisJobQueue(client=fake_redis)
    q.enqueue(ThumbnailJob(user_id=1, file_id=7))

    def crash(job):
        raise RuntimeError("worker died")

    q.consume(crash, stop, timeout=0)
    assert len(fake_redis.lists["fileQueue:processing"]) == 1

    assert q.requeue_unacked() == 1
    stop.clear()
    seen = []
    q.consume(lambda job: seen.append(job.file_id), stop, timeout=0)
    assert seen == [7]
    assert fake_redis.lists["fileQueue:processing"] == []


def test_redis_queue_unavailable(fake_redis):
    q = RedisJobQueue(client=fake_redis)
    fake_redis.down = True
    assert q.is_alive() is False
    with pytest.raises(StorageError):
        q.enqueue(ThumbnailJob(user_id=1, file_id=1))


def test_redis_consume_survives_connection_errors(fake_redis):
    stop = threading.Event()
    fake_redis.on_empty = stop.set
    fake_redis.blmove_failures = 2
    q = RedisJobQueue(client=fake_redis)
    q.enqueue(ThumbnailJob(user_id=1, file_id=3))
    seen = []

    q.consume(lambda job: seen.append(job.file_id), stop, timeout=0, retry_delay=0)

    assert seen == [3]
    assert fake_redis.lists["fileQueue:processing"] == []


def test_redis_consume_keeps_job_when_ack_fails(fake_redis):
    stop = threading.Event()
    fake_redis.on_empty = stop.set
    fake_redis.lrem_failures = 1
    q = RedisJobQueue(client=fake_redis)
    q.enqueue(ThumbnailJob(user_id=1, file_id=3))
    q.enqueue(ThumbnailJob(user_id=1, file_id=4))
    seen = []

    q.consume(lambda job: seen.append(job.file_id), stop, timeout=0, retry_delay=0)

    assert seen == [3, 4]
    # The unacknowledged job is redelivered after a requeue
    assert [json.loads(raw)["fileId"] for raw in fake_redis.lists["fileQueue:processing"]] == [3]
    assert q.requeue_unacked() == 1
