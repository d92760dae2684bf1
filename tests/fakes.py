from todo_api.storage import BlobStorage, StorageError


class InMemoryStorage(BlobStorage):
    """Object store double; remembers every object it was handed."""

    name = "memory"

    def __init__(self, fail_put: bool = False):
        self.objects = {}
        self.deleted = []
        self.fail_put = fail_put

    def put_object(self, key, fileobj, content_type=None):
        if self.fail_put:
            raise StorageError("put failed")
        self.objects[key] = (fileobj.read(), content_type)
        return self.get_object_url(key)

    def get_object_url(self, key):
        return f"memory://bucket/{key}"

    def delete_object(self, key):
        self.deleted.append(key)
        self.objects.pop(key, None)
