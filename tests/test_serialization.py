import json

import pytest

from crop_annotation.core.annotation import Annotation, AnnotationStore, Point
from crop_annotation.utils.serialization import load_store, save_store


def test_save_and_load_store(tmp_path):
    store = AnnotationStore()
    a = Annotation.rectangle(Point(0, 0), Point(10, 10), name="car")
    b = Annotation.rectangle(Point(5, 5), Point(20, 20), name="person")
    store.add("a.jpg", a)
    store.add("a.jpg", b)
    a.add_association(b)
    b.add_association(a)

    path = save_store(store, tmp_path / "out" / "annotations.json")
    loaded = load_store(path)

    assert loaded.image_keys() == ["a.jpg"]
    assert loaded.get("a.jpg", a.id).associations == [b.id]
    assert loaded.get("a.jpg", b.id).name == "person"


def test_load_store_rejects_unknown_version(tmp_path):
    path = tmp_path / "annotations.json"
    path.write_text(json.dumps({"version": 99, "images": {}}))
    with pytest.raises(ValueError):
        load_store(path)
