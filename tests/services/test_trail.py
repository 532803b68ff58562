from brestoise.services.trail import DebugTrail


def test_header_value_keeps_order():
    trail = DebugTrail()
    trail.ok("a")
    trail.skipped("b")
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        trail.error("c")

    assert trail.header_value() == "a=ok;b=skipped;c=error"
    assert trail.outcome("b") == "skipped"
    assert trail.outcome("missing") is None
