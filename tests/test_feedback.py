from selfiq.services.feedback import ANSWER_RECORDED, ASSESSMENT_COMPLETED, FeedbackService


def test_cues_only_dispatch_while_initialized():
    seen = []
    fb = FeedbackService()
    fb.subscribe(ANSWER_RECORDED, lambda name, data: seen.append((name, data)))
    assert fb.cue(ANSWER_RECORDED, question_id="q1") == 0
    fb.initialize()
    assert fb.cue(ANSWER_RECORDED, question_id="q1") == 1
    assert seen == [(ANSWER_RECORDED, {"question_id": "q1"})]
    fb.dispose()
    assert not fb.initialized
    assert fb.cue(ANSWER_RECORDED, question_id="q2") == 0


def test_disabled_service_is_silent():
    seen = []
    fb = FeedbackService(enabled=False)
    fb.initialize()
    fb.subscribe(ASSESSMENT_COMPLETED, lambda name, data: seen.append(name))
    assert fb.cue(ASSESSMENT_COMPLETED) == 0
    fb.set_enabled(True)
    assert fb.cue(ASSESSMENT_COMPLETED) == 1
    assert seen == [ASSESSMENT_COMPLETED]


def test_failing_listener_does_not_break_others():
    seen = []

    def broken(name, data):
        raise RuntimeError("audio device missing")

    fb = FeedbackService()
    fb.initialize()
    fb.subscribe(ANSWER_RECORDED, broken)
    fb.subscribe(ANSWER_RECORDED, lambda name, data: seen.append(name))
    assert fb.cue(ANSWER_RECORDED) == 1
    assert seen == [ANSWER_RECORDED]


def test_unsubscribe():
    seen = []
    listener = lambda name, data: seen.append(name)  # noqa: E731
    fb = FeedbackService()
    fb.initialize()
    fb.subscribe(ANSWER_RECORDED, listener)
    fb.unsubscribe(ANSWER_RECORDED, listener)
    fb.unsubscribe(ANSWER_RECORDED, listener)
    assert fb.cue(ANSWER_RECORDED) == 0
    assert seen == []
