import importlib.util
import io
import json
import os
import threading

import pytest
from botocore.exceptions import ClientError

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def load_lambda_module(name):
    """Loads lambda/<name>/main.py; the 'lambda' directory is not an importable package."""
    path = os.path.join(ROOT_DIR, "lambda", name, "main.py")
    module_spec = importlib.util.spec_from_file_location(f"{name}_main", path)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def client_error(code, message, operation):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeHitsTable:
    """In-memory stand-in for the hits table; ADD is applied under a lock like DynamoDB does."""

    def __init__(self, error=None):
        self.items = {}
        self.error = error
        self._lock = threading.Lock()

    def update_item(self, Key, UpdateExpression, ExpressionAttributeValues):
        if self.error:
            raise self.error
        assert UpdateExpression == "ADD hits :incr"
        with self._lock:
            item = self.items.setdefault(Key["path"], {"path": Key["path"]})
            item["hits"] = item.get("hits", 0) + ExpressionAttributeValues[":incr"]

    def hits(self, path):
        return self.items.get(path, {}).get("hits", 0)


class FakeLambdaClient:
    def __init__(self, response=None, function_error=None, error=None):
        self.response = response if response is not None else {"statusCode": 200, "body": "ok"}
        self.function_error = function_error
        self.error = error
        self.invocations = []

    def invoke(self, FunctionName, Payload):
        if self.error:
            raise self.error
        self.invocations.append((FunctionName, json.loads(Payload)))
        result = {"StatusCode": 200, "Payload": io.BytesIO(json.dumps(self.response).encode())}
        if self.function_error:
            result["FunctionError"] = self.function_error
        return result


@pytest.fixture
def make_table():
    return FakeHitsTable


@pytest.fixture
def make_lambda_client():
    return FakeLambdaClient


@pytest.fixture
def make_client_error():
    return client_error


@pytest.fixture
def hitcounter_main():
    return load_lambda_module("hitcounter")


@pytest.fixture
def hello_main():
    return load_lambda_module("hello")
