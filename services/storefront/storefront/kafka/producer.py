"""
Kafka producer for storefront events
"""
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional
from confluent_kafka import Producer
from storefront.config import settings

logger = logging.getLogger(__name__)


class StorefrontEventProducer:
    """Kafka producer for storefront events"""

    def __init__(self):
        self.bootstrap_servers = settings.kafka_bootstrap_servers
        self.events_topic = settings.kafka_events_topic
        self.flush_timeout = settings.kafka_flush_timeout_seconds

        self.producer = Producer({
            'bootstrap.servers': self.bootstrap_servers,
            'client.id': 'storefront-service',
        })

    def _publish_event(self, event_type: str, payload: Dict[str, Any], key: Optional[str] = None):
        """Internal method to publish event to Kafka"""
        event = {
            "type": event_type,
            "eventId": str(uuid.uuid4()),
            "createdAt": datetime.now(timezone.utc).isoformat(),
            **payload
        }

        try:
            # Key by product/order so events for one entity stay ordered on a partition
            kafka_key = key or event.get("productId") or event.get("orderId") or str(uuid.uuid4())

            self.producer.produce(
                self.events_topic,
                key=str(kafka_key),
                value=json.dumps(event).encode('utf-8'),
                callback=self._delivery_callback
            )

            # Trigger delivery callback
            self.producer.poll(0)

            logger.info(f"Published {event_type} event to {self.events_topic}")
        except Exception as e:
            logger.error(f"Failed to publish {event_type} event: {e}", exc_info=True)
            raise

    def _delivery_callback(self, err, msg):
        """Callback for message delivery"""
        if err:
            logger.error(f"Message delivery failed: {err}")
        else:
            logger.debug(f"Message delivered to {msg.topic()} [{msg.partition()}]")

    def publish_product_created(self, product_id: int, name: str, stock: int):
        self._publish_event(
            "PRODUCT_CREATED",
            {"productId": product_id, "name": name, "stock": stock},
            key=str(product_id)
        )

    def publish_product_updated(self, product_id: int, name: str, status: str):
        self._publish_event(
            "PRODUCT_UPDATED",
            {"productId": product_id, "name": name, "status": status},
            key=str(product_id)
        )

    def publish_product_deleted(self, product_id: int, permanent: bool):
        self._publish_event(
            "PRODUCT_DELETED",
            {"productId": product_id, "permanent": permanent},
            key=str(product_id)
        )

    def publish_stock_updated(self, product_id: int, previous_stock: int, stock: int):
        self._publish_event(
            "STOCK_UPDATED",
            {"productId": product_id, "previousStock": previous_stock, "stock": stock},
            key=str(product_id)
        )

    def publish_back_in_stock(self, product_id: int, name: str, notified_user_ids: List[int]):
        """Publish BackInStockEvent so downstream channels (email, push) can fan out"""
        self._publish_event(
            "PRODUCT_BACK_IN_STOCK",
            {"productId": product_id, "name": name, "notifiedUserIds": notified_user_ids},
            key=str(product_id)
        )

    def publish_order_placed(self, order_id: str, user_id: Optional[int], total: int, item_count: int):
        self._publish_event(
            "ORDER_PLACED",
            {"orderId": order_id, "userId": user_id, "total": total, "itemCount": item_count},
            key=order_id
        )

    def flush(self):
        """Flush pending messages"""
        remaining = self.producer.flush(self.flush_timeout)
        if remaining:
            logger.warning(f"{remaining} Kafka messages still pending after flush timeout")


# Lazy initialization - only create producer when first used
_event_producer_instance = None
_producer_initialization_failed = False


def get_event_producer() -> Optional[StorefrontEventProducer]:
    """Get or create the global event producer instance (lazy initialization)"""
    global _event_producer_instance, _producer_initialization_failed

    if not settings.kafka_enabled or _producer_initialization_failed:
        return None

    if _event_producer_instance is None:
        try:
            _event_producer_instance = StorefrontEventProducer()
            logger.info(f"Initialized Kafka producer for {_event_producer_instance.bootstrap_servers}")
        except Exception as e:
            logger.warning(f"Failed to initialize Kafka producer: {e}. Events will not be published.")
            _producer_initialization_failed = True
            return None
    return _event_producer_instance


class EventProducerProxy:
    """Best-effort facade: publishing never fails the request that triggered it"""

    def _call(self, method_name: str, *args, **kwargs):
        producer = get_event_producer()
        if producer is None:
            return
        try:
            getattr(producer, method_name)(*args, **kwargs)
            producer.flush()
        except Exception as e:
            logger.warning(f"Failed to publish event via {method_name}: {e}")

    def publish_product_created(self, *args, **kwargs):
        self._call("publish_product_created", *args, **kwargs)

    def publish_product_updated(self, *args, **kwargs):
        self._call("publish_product_updated", *args, **kwargs)

    def publish_product_deleted(self, *args, **kwargs):
        self._call("publish_product_deleted", *args, **kwargs)

    def publish_stock_updated(self, *args, **kwargs):
        self._call("publish_stock_updated", *args, **kwargs)

    def publish_back_in_stock(self, *args, **kwargs):
        self._call("publish_back_in_stock", *args, **kwargs)

    def publish_order_placed(self, *args, **kwargs):
        self._call("publish_order_placed", *args, **kwargs)

    def flush(self):
        # Never create a producer just to flush it
        if _event_producer_instance is None:
            return
        try:
            _event_producer_instance.flush()
        except Exception as e:
            logger.warning(f"Failed to flush Kafka producer: {e}")


event_producer = EventProducerProxy()
