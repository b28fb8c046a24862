import threading

import pytest

from xor_tickler.state_queue import SingleSlotQueue


class TestSingleSlotQueue:
    """Test suite for SingleSlotQueue"""

    def test_latest_wins(self):
        """Test that an unread value is replaced"""
        queue = SingleSlotQueue()
        queue.publish(1)
        queue.publish(2)
        assert queue.get(timeout=1) == 2

    def test_get_consumes_value(self):
        """Test that a value is read once"""
        queue = SingleSlotQueue()
        queue.publish("a")
        assert queue.get(timeout=1) == "a"
        with pytest.raises(TimeoutError):
            queue.get(timeout=0.01)

    def test_pending_value_survives_close(self):
        """Test that closing keeps the last value readable"""
        queue = SingleSlotQueue()
        queue.publish("final")
        queue.close()
        assert queue.get(timeout=1) == "final"
        assert queue.get(timeout=1) is None

    def test_publish_after_close_is_ignored(self):
        """Test publishing to a closed queue"""
        queue = SingleSlotQueue()
        queue.close()
        queue.publish("late")
        assert queue.closed
        assert queue.get(timeout=1) is None

    def test_close_wakes_consumer(self):
        """Test that a blocked get returns None when the queue closes"""
        queue = SingleSlotQueue()
        results = []
        consumer = threading.Thread(target=lambda: results.append(queue.get(timeout=5)))
        consumer.start()
        queue.close()
        consumer.join(timeout=5)
        assert results == [None]
