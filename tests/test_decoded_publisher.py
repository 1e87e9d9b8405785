import threading
import unittest
from unittest import mock

import requests

from qrcam.events.decoded_publisher import BackgroundPublisher, DecodedPublisher


class TestDecodedPublisher(unittest.TestCase):
    def test_posts_strings_to_scan_log(self):
        http = mock.Mock()
        http.post.return_value.json.return_value = {"scan_id": 1}
        pub = DecodedPublisher("http://backend:8000/", "/api/scans", timeout_seconds=3, session=http)

        self.assertEqual(pub.publish(["a", "b"], camera_position="front"), {"scan_id": 1})

        args, kwargs = http.post.call_args
        self.assertEqual(args[0], "http://backend:8000/api/scans")
        self.assertEqual(kwargs["timeout"], 3)
        self.assertEqual(kwargs["json"]["strings"], ["a", "b"])
        self.assertEqual(kwargs["json"]["camera_position"], "front")
        self.assertIn("timestamp", kwargs["json"])

    def test_http_error_propagates(self):
        http = mock.Mock()
        http.post.return_value.raise_for_status.side_effect = requests.HTTPError("422")
        pub = DecodedPublisher("http://backend:8000", session=http)
        with self.assertRaises(requests.HTTPError):
            pub.publish(["a"])


class TestBackgroundPublisher(unittest.TestCase):
    def setUp(self):
        self.gate = threading.Event()
        self.inner = mock.Mock(spec=DecodedPublisher)
        self.inner.publish.side_effect = self._slow_publish
        self.bg = BackgroundPublisher(self.inner, max_pending=2)
        self.addCleanup(self.bg.close)
        self.addCleanup(self.gate.set)

    def _slow_publish(self, strings, camera_position=None):
        self.gate.wait(5)
        return {"ok": True}

    def test_submit_does_not_wait_for_http(self):
        fut = self.bg.submit(["a"], camera_position="back")
        self.assertIsNotNone(fut)
        self.assertFalse(fut.done())
        self.gate.set()
        self.assertEqual(fut.result(timeout=3), {"ok": True})
        self.inner.publish.assert_called_once_with(["a"], camera_position="back")

    def test_backlog_is_bounded(self):
        self.assertIsNotNone(self.bg.submit(["1"]))
        self.assertIsNotNone(self.bg.submit(["2"]))
        with self.assertLogs("qrcam.events.decoded_publisher", level="WARNING"):
            self.assertIsNone(self.bg.submit(["3"]))
        self.assertEqual(self.bg.dropped, 1)

    def test_failure_is_logged(self):
        self.inner.publish.side_effect = requests.ConnectionError("backend down")
        with self.assertLogs("qrcam.events.decoded_publisher", level="WARNING"):
            fut = self.bg.submit(["x"])
            self.assertIsNone(fut.result(timeout=3))
        # a failed report frees its backlog slot
        self.assertIsNotNone(self.bg.submit(["y"]))


if __name__ == "__main__":
    unittest.main()
