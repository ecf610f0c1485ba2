import mutate

ANNOTATION = mutate.DEFAULTS.ANNOTATION


def test_single_selector():
    res = mutate.node_selector_from_annotations({ANNOTATION: "foo=bar"}, ANNOTATION)
    assert res == {"foo": "bar"}


def test_multiple_selectors():
    res = mutate.node_selector_from_annotations(
        {ANNOTATION: "foo=bar,baz=qux"}, ANNOTATION
    )
    assert res == {"foo": "bar", "baz": "qux"}


def test_malformed_selector_only():
    res = mutate.node_selector_from_annotations({ANNOTATION: "foo"}, ANNOTATION)
    assert res == {}


def test_malformed_selector_dropped():
    res = mutate.node_selector_from_annotations(
        {ANNOTATION: "a=1,bad,c=3"}, ANNOTATION
    )
    assert res == {"a": "1", "c": "3"}


def test_too_many_separators_dropped():
    res = mutate.node_selector_from_annotations(
        {ANNOTATION: "a=1=2,b=2"}, ANNOTATION
    )
    assert res == {"b": "2"}


def test_empty_annotation_value():
    res = mutate.node_selector_from_annotations({ANNOTATION: ""}, ANNOTATION)
    assert res == {}


def test_duplicate_keys_last_wins():
    res = mutate.node_selector_from_annotations(
        {ANNOTATION: "disk=hdd,disk=ssd"}, ANNOTATION
    )
    assert res == {"disk": "ssd"}


def test_annotation_missing():
    res = mutate.node_selector_from_annotations(
        {"example.com/unrelated": "foo=bar"}, ANNOTATION
    )
    assert res == {}


def test_no_annotations():
    assert mutate.node_selector_from_annotations(None, ANNOTATION) == {}
    assert mutate.node_selector_from_annotations({}, ANNOTATION) == {}


def test_parse_is_repeatable():
    annotations = {ANNOTATION: "a=1,b=2"}
    first = mutate.node_selector_from_annotations(annotations, ANNOTATION)
    second = mutate.node_selector_from_annotations(annotations, ANNOTATION)
    assert first == second == {"a": "1", "b": "2"}


def test_malformed_selector_logged(caplog):
    mutate.node_selector_from_annotations({ANNOTATION: "a=1,bad"}, ANNOTATION)
    assert "ignoring malformed node selector 'bad'" in caplog.text
