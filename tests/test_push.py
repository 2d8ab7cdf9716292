import httpx

from condosync.services import PermissionState, PushFanout, PushNotifier, SqlDocumentStore


async def test_fanout_sends_one_message_per_device(session_factory, test_settings):
    test_settings.FCM_PROJECT_ID = "condo-ps1"
    test_settings.FCM_ACCESS_TOKEN = "fcm-token"
    sent = []

    def handler(request: httpx.Request):
        sent.append(request)
        status = 404 if b"token-b" in request.content else 200
        return httpx.Response(status, json={})

    store = SqlDocumentStore(session_factory)
    fanout = PushFanout(store, test_settings, transport=httpx.MockTransport(handler))
    assert await fanout.register_token("u1", "token-a") == PermissionState.GRANTED
    assert await fanout.register_token("u2", "token-b") == PermissionState.GRANTED
    assert await fanout.register_token("u3", "") == PermissionState.DENIED

    report = await fanout.dispatch("all", "ALERTA SOS", "Portão aberto", {"house_number": 5})
    assert report == {"sent": 1, "failed": 1, "skipped": False}
    assert sent[0].url.path == "/v1/projects/condo-ps1/messages:send"
    assert sent[0].headers["Authorization"] == "Bearer fcm-token"

    assert (await fanout.dispatch("u1", "t", "b"))["sent"] == 1


async def test_fanout_is_skipped_without_fcm(session_factory, test_settings):
    fanout = PushFanout(SqlDocumentStore(session_factory), test_settings)
    await fanout.register_token("u1", "token-a")
    assert (await fanout.dispatch("all", "t", "b"))["skipped"] is True


async def test_notifier_never_raises():
    def handler(request):
        return httpx.Response(500)

    notifier = PushNotifier(endpoint_url="http://push.test/send", transport=httpx.MockTransport(handler))
    assert await notifier.notify("all", "t", "b") is False
    assert await PushNotifier().notify("all", "t", "b") is False


def test_foreground_listeners():
    notifier = PushNotifier()
    received = []
    unsubscribe = notifier.on_foreground_message(received.append)
    notifier.deliver_foreground({"title": "oi"})
    unsubscribe()
    notifier.deliver_foreground({"title": "de novo"})
    assert received == [{"title": "oi"}]
