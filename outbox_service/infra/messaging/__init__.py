"""RabbitMQ messaging via FastStream: broker lifecycle and outbox publisher.

The notification consumer lives in ``handlers`` and is imported only by
the FastStream worker process.
"""

from .broker import create_broker, get_broker, start_broker, stop_broker
from .publisher import RabbitPublisher

__all__ = ["RabbitPublisher", "create_broker", "get_broker", "start_broker", "stop_broker"]
