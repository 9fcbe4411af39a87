from camera_tracker.services.media_locator import MediaLocator


def test_resolve_existing_clip(bucket):
    bucket.objects.add("videos/abc.mp4")
    locator = MediaLocator(bucket)

    assert locator.resolve("abc") == "https://storage.googleapis.com/test-bucket/videos/abc.mp4"
    assert locator.resolve("abc") == "https://storage.googleapis.com/test-bucket/videos/abc.mp4"
    assert bucket.made_public == ["videos/abc.mp4", "videos/abc.mp4"]


def test_resolve_missing_clip(bucket):
    assert MediaLocator(bucket).resolve("nothing") is None
    assert bucket.made_public == []


def test_custom_prefix(bucket):
    bucket.objects.add("clips/x.mp4")
    locator = MediaLocator(bucket, prefix="/clips/")
    assert locator.path_for("x") == "clips/x.mp4"
    assert locator.resolve("x").endswith("/clips/x.mp4")


class TimedBlob:
    def __init__(self, calls, name):
        self.calls = calls
        self.name = name
        self.public_url = f"https://example.test/{name}"

    def exists(self, timeout=None):
        self.calls.append(("exists", timeout))
        return True

    def make_public(self, timeout=None):
        self.calls.append(("make_public", timeout))


class TimedBucket:
    name = "timed"

    def __init__(self):
        self.calls = []

    def blob(self, name):
        return TimedBlob(self.calls, name)


def test_storage_calls_receive_timeout():
    timed = TimedBucket()
    MediaLocator(timed, timeout=3.5).resolve("clip")
    assert timed.calls == [("exists", 3.5), ("make_public", 3.5)]
