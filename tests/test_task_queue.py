import threading
import time
import unittest

from storefront.services.task_queue import TaskQueue, ThreadTaskQueue
from tests.fakes import ManualTaskQueue, make_logger

WAIT_S = 5.0


class TestThreadTaskQueue(unittest.TestCase):
    def setUp(self):
        self.logger = make_logger()
        self.tasks = ThreadTaskQueue(logger=self.logger, name="TestQueue")
        self.addCleanup(self.tasks.stop)

    def test_runs_tasks_in_submission_order(self):
        ran: list[int] = []
        done = threading.Event()
        self.tasks.start()
        for i in range(5):
            self.tasks.defer(lambda i=i: ran.append(i))
        self.tasks.defer(done.set)

        self.assertTrue(done.wait(WAIT_S))
        self.assertEqual(ran, [0, 1, 2, 3, 4])

    def test_failing_task_is_logged_and_next_still_runs(self):
        done = threading.Event()

        def _boom():
            raise RuntimeError("profile fetch exploded")

        self.tasks.start()
        self.tasks.defer(_boom)
        self.tasks.defer(done.set)

        self.assertTrue(done.wait(WAIT_S))
        self.logger.error.assert_called_once()
        self.assertIn("Deferred task failed", self.logger.error.call_args.args[0])

    def test_tasks_deferred_before_start_run_after_it(self):
        done = threading.Event()
        self.tasks.defer(done.set)
        self.assertFalse(done.wait(0.1))

        self.tasks.start()
        self.assertTrue(done.wait(WAIT_S))

    def test_stop_drains_queue_and_joins_worker(self):
        ran: list[str] = []
        self.tasks.start()
        self.tasks.defer(lambda: time.sleep(0.2))
        self.tasks.defer(lambda: ran.append("queued behind slow task"))

        self.tasks.stop()

        self.assertEqual(ran, ["queued behind slow task"])
        self.assertFalse(self.tasks.is_running)

    def test_start_twice_keeps_one_worker(self):
        self.tasks.start()
        self.tasks.start()
        names = [t.name for t in threading.enumerate() if t.name == "TestQueue"]
        self.assertEqual(len(names), 1)

    def test_stop_without_start_is_noop(self):
        self.tasks.stop()
        self.assertFalse(self.tasks.is_running)

    def test_both_queues_satisfy_protocol(self):
        self.assertIsInstance(self.tasks, TaskQueue)
        self.assertIsInstance(ManualTaskQueue(), TaskQueue)
