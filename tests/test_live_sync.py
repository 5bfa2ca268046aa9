import json

import pytest
import redis

from infinity_timeline.core.exceptions import AuthorizationError
from infinity_timeline.redis.client import RedisClient, flow_channel
from infinity_timeline.schemas.flow import EdgeCreate


@pytest.fixture
def subscription(redis_conn, instance_flow):
    pubsub = redis_conn.pubsub()
    pubsub.subscribe(flow_channel(instance_flow.id))
    yield pubsub
    pubsub.close()


def received(pubsub):
    events = []
    while True:
        message = pubsub.get_message(timeout=0.1)
        if message is None:
            return events
        if message["type"] == "message":
            events.append(json.loads(message["data"]))


def test_graph_changes_are_published(admin_store, admin_user, instance_flow, subscription):
    a = admin_store.create_node(instance_flow.id, "service", 0, 0)
    b = admin_store.create_node(instance_flow.id, "product", 300, 0)
    admin_store.update_node_position(a.id, 50, 60)
    edge = admin_store.create_edge(
        instance_flow.id, EdgeCreate(source_node_id=a.id, target_node_id=b.id)
    )
    admin_store.delete_edge(edge.id)
    admin_store.delete_node(b.id)

    events = received(subscription)
    assert [e["type"] for e in events] == [
        "node.created",
        "node.created",
        "node.moved",
        "edge.created",
        "edge.deleted",
        "node.deleted",
    ]
    assert events[2]["payload"] == {"id": a.id, "x": 50, "y": 60}
    assert {e["actor_id"] for e in events} == {admin_user.id}
    assert {e["flow_id"] for e in events} == {instance_flow.id}


def test_refused_writes_publish_nothing(client_store, admin_store, instance_flow, subscription):
    node = admin_store.create_node(instance_flow.id, "service", 0, 0)
    received(subscription)

    with pytest.raises(AuthorizationError):
        client_store.update_node_position(node.id, 5, 5)
    assert received(subscription) == []


def test_publish_failure_is_logged_not_raised():
    class BrokenConnection:
        def publish(self, channel, message):
            raise redis.exceptions.ConnectionError("down")

    client = RedisClient(BrokenConnection())
    assert client.publish_flow_event(1, "node.created", {"id": 1}) is False
