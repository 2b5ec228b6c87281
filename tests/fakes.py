"""In-memory stand-ins for Supabase and the push HTTP endpoints."""

import json
from datetime import datetime
from types import SimpleNamespace
from urllib.parse import parse_qs

import httpx


# ---------------------------------------------------------------------------
# Supabase (subset of the postgrest query builder used by the service)
# ---------------------------------------------------------------------------

def _coerce(value):
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


def _compare(left, right):
    if left is None or right is None:
        return None
    a, b = _coerce(left), _coerce(right)
    return (a > b) - (a < b)


def _is(value, expected):
    if expected == "null":
        return value is None
    if expected == "true":
        return value is True
    if expected == "false":
        return value is False
    raise ValueError(f"unsupported is_ value {expected!r}")


class FakeResponse:
    def __init__(self, data):
        self.data = data


class _Not:
    def __init__(self, query):
        self._query = query

    def is_(self, column, value):
        self._query._filters.append(lambda r: not _is(r.get(column), value))
        return self._query


class FakeQuery:
    def __init__(self, db, table):
        self._db = db
        self._table = table
        self._filters = []
        self._columns = "*"
        self._update = None

    def select(self, columns="*", **kwargs):
        self._columns = columns
        return self

    def update(self, values):
        self._update = dict(values)
        return self

    def eq(self, column, value):
        self._filters.append(lambda r: r.get(column) == value)
        return self

    def is_(self, column, value):
        self._filters.append(lambda r: _is(r.get(column), value))
        return self

    @property
    def not_(self):
        return _Not(self)

    def lte(self, column, value):
        self._filters.append(lambda r: _compare(r.get(column), value) in (-1, 0))
        return self

    def lt(self, column, value):
        self._filters.append(lambda r: _compare(r.get(column), value) == -1)
        return self

    def in_(self, column, values):
        wanted = set(values)
        self._filters.append(lambda r: r.get(column) in wanted)
        return self

    def or_(self, expression):
        clauses = []
        for part in expression.split(","):
            column, op, value = part.split(".", 2)
            if op == "is":
                clauses.append(lambda r, c=column, v=value: _is(r.get(c), v))
            elif op == "lt":
                clauses.append(lambda r, c=column, v=value: _compare(r.get(c), v) == -1)
            else:
                raise ValueError(f"unsupported or_ operator {op!r}")
        self._filters.append(lambda r: any(c(r) for c in clauses))
        return self

    def _project(self, row):
        if self._columns.strip() == "*":
            return dict(row)
        cols = [c.strip() for c in self._columns.split(",")]
        return {c: row.get(c) for c in cols}

    def execute(self):
        rows = [r for r in self._db.tables.setdefault(self._table, []) if all(f(r) for f in self._filters)]
        if self._update is not None:
            if self._db.fail_updates:
                raise RuntimeError("database unavailable")
            for r in rows:
                r.update(self._update)
            self._db.updates.append((self._table, dict(self._update), [r.get("id") for r in rows]))
            return FakeResponse([dict(r) for r in rows])
        return FakeResponse([self._project(r) for r in rows])


class FakeSupabase:
    def __init__(self, **tables):
        self.tables = {name: [dict(r) for r in rows] for name, rows in tables.items()}
        self.updates = []
        self.fail_updates = False
        self.auth = SimpleNamespace(get_user=self._get_user)
        self.users_by_token = {}

    def table(self, name):
        return FakeQuery(self, name)

    def row(self, table, row_id):
        return next(r for r in self.tables[table] if r.get("id") == row_id)

    def _get_user(self, token):
        user_id = self.users_by_token.get(token)
        if user_id is None:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=user_id, email=f"{user_id}@example.com"))


# ---------------------------------------------------------------------------
# Expo relay / Google OAuth / FCM HTTP v1
# ---------------------------------------------------------------------------

class PushBackend:
    """Routes httpx requests to scripted Expo, OAuth and FCM responses."""

    def __init__(self):
        self.expo_status = 200
        self.expo_ticket = lambda message: {"status": "ok", "id": f"ticket-{message['to']}"}
        self.oauth_status = 200
        self.fcm_status = lambda message: 200
        self.expo_requests = []
        self.oauth_requests = []
        self.fcm_requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host == "exp.host":
            body = json.loads(request.content)
            self.expo_requests.append(body)
            if self.expo_status >= 300:
                return httpx.Response(self.expo_status, text="relay unavailable")
            return httpx.Response(200, json={"data": [self.expo_ticket(m) for m in body]})

        if host == "oauth2.googleapis.com":
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            self.oauth_requests.append(form)
            if self.oauth_status >= 300:
                return httpx.Response(self.oauth_status, text="invalid_grant")
            return httpx.Response(200, json={"access_token": "ya29.test-token", "expires_in": 3599})

        if host == "fcm.googleapis.com":
            body = json.loads(request.content)
            self.fcm_requests.append({
                "url": str(request.url),
                "authorization": request.headers.get("Authorization"),
                "body": body,
            })
            status = self.fcm_status(body["message"])
            if status >= 300:
                return httpx.Response(status, json={"error": {"status": "UNREGISTERED"}})
            return httpx.Response(200, json={"name": f"projects/remmy-test/messages/{len(self.fcm_requests)}"})

        return httpx.Response(404)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))
