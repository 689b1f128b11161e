from atlasstudio.metrics import UNMATCHED_ENDPOINT, http_requests_total


def endpoints_seen() -> set:
    return {
        sample.labels["endpoint"]
        for metric in http_requests_total.collect()
        for sample in metric.samples
        if sample.name == "http_requests_total"
    }


async def test_unknown_paths_share_one_series(client):
    before = endpoints_seen()

    for i in range(50):
        response = await client.get(f"/no-such-page/{i}")
        assert response.status_code == 404

    after = endpoints_seen()

    assert UNMATCHED_ENDPOINT in after
    assert len(after - before) <= 1
    assert not any(endpoint.startswith("/no-such-page") for endpoint in after)


async def test_requests_are_labelled_by_route_template(client):
    response = await client.get("/oauth2/authorization/myspace")

    assert response.status_code == 404
    endpoints = endpoints_seen()
    assert "/oauth2/authorization/{provider}" in endpoints
    assert "/oauth2/authorization/myspace" not in endpoints
