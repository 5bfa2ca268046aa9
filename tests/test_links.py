import pytest

from infinity_timeline.core.youtube import extract_video_id, is_youtube_url

from .test_nodes import add_node


@pytest.mark.parametrize(
    "url,video_id",
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/embed/dQw4w9WgXcQ?start=10", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtu.be/short", None),
        ("https://example.com/watch?v=abc", None),
    ],
)
def test_extract_video_id(url, video_id):
    assert extract_video_id(url) == video_id


def test_is_youtube_url():
    assert is_youtube_url("https://youtu.be/dQw4w9WgXcQ")
    assert not is_youtube_url("https://vimeo.com/1234")


def test_links_newest_first(client, admin_headers, client_headers, instance_flow):
    node = add_node(client, admin_headers, instance_flow.id, "youtube")
    url = f"/api/v1/nodes/{node['id']}/links"

    r = client.post(
        url, headers=admin_headers, json={"title": "Docs", "url": "https://example.com"}
    )
    assert r.status_code == 200
    assert r.json()["video_id"] is None

    r = client.post(
        url,
        headers=admin_headers,
        json={"title": "Intro", "url": "https://youtu.be/dQw4w9WgXcQ"},
    )
    assert r.json()["video_id"] == "dQw4w9WgXcQ"

    r = client.get(url, headers=client_headers)
    assert [link["title"] for link in r.json()] == ["Intro", "Docs"]


def test_link_requires_title_and_url(client, admin_headers, template_flow):
    node = add_node(client, admin_headers, template_flow.id)
    r = client.post(
        f"/api/v1/nodes/{node['id']}/links",
        headers=admin_headers,
        json={"title": "", "url": "https://example.com"},
    )
    assert r.status_code == 422


def test_delete_link(client, admin_headers, client_headers, instance_flow):
    node = add_node(client, admin_headers, instance_flow.id)
    link = client.post(
        f"/api/v1/nodes/{node['id']}/links",
        headers=admin_headers,
        json={"title": "Docs", "url": "https://example.com"},
    ).json()

    assert client.delete(f"/api/v1/links/{link['id']}", headers=client_headers).status_code == 403
    assert client.delete(f"/api/v1/links/{link['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/v1/links/{link['id']}", headers=admin_headers).status_code == 404
