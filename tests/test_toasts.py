from condosync.sync import ToastKind, ToastQueue


class ManualClock:
    def __init__(self):
        self.value = 100.0

    def __call__(self):
        return self.value


def test_toasts_expire_after_ttl():
    clock = ManualClock()
    queue = ToastQueue(ttl_seconds=4.5, clock=clock)
    first = queue.add("Reserva realizada com sucesso!")
    clock.value += 3
    second = queue.add("Erro ao comunicar com o servidor.", ToastKind.ERROR)

    assert [t.id for t in queue.active()] == [first.id, second.id]

    clock.value += 1.6
    assert [t.id for t in queue.active()] == [second.id]

    clock.value += 3
    assert queue.active() == []


def test_ids_are_unique_and_dismiss_is_idempotent():
    queue = ToastQueue(ttl_seconds=10, clock=ManualClock())
    a = queue.add("a")
    b = queue.add("b", ToastKind.INFO)
    assert a.id != b.id
    assert queue.dismiss(a.id)
    assert not queue.dismiss(a.id)
    assert [t.message for t in queue.active()] == ["b"]
    assert queue.last.kind == ToastKind.INFO
