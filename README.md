# hnex-api

Building blocks for a JSON web API for user accounts, on Flask and
SQLAlchemy: database models, request body binding, argon2id password
hashing, HS256 access and refresh tokens, a bearer-token check, and
request handlers for registration, login, logout, token refresh,
Google and Facebook sign-in, and user profiles.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Modules

- `hnex_api.models` – SQLAlchemy models `User` and `Upload` on the
  declarative `Base`, with the enums `Role` (`ADMIN`, `USER`) and `Gender`.
  Both models have a string `id` (a fresh UUID by default), timestamps,
  a `deleted_at` soft-deletion column, and `to_dict()` for JSON output.
- `hnex_api.dtos` – frozen dataclasses for request and provider response
  bodies (`LoginDto`, `RegisterDto`, `RefreshTokenDto`, `GoogleAuthRequest`,
  `GoogleTokenInfo`, `FacebookAuthRequest`, `FacebookDebugToken`,
  `FacebookUserInfo`). Each `from_dict(data)` checks field types and
  required / e-mail rules and raises `BindingError` when they fail.
- `hnex_api.passwords` – `hash_password(password)` returns an argon2id
  hash in PHC form (`$argon2id$v=19$m=65536,t=3,p=2$salt$hash`);
  `verify_password(password, encoded_hash)` returns `True` or `False` and
  raises `InvalidHashError` for a malformed hash.
- `hnex_api.tokens` – `generate_tokens(user_id, role, provider)` returns an
  `(access, refresh)` pair; `verify_token(token_string, name)` checks a
  token against the secret held in environment variable `name` and
  returns `JWTClaims`. Both raise `TokenError`.
- `hnex_api.paths` – `gen_unique_path(name)` returns
  `assets/<uuid><extension of name>`.
- `hnex_api.config` – `load_env(dotenv_path=None)` reads `.env` into an
  `Env`; `connect_db(env)` opens the database, creates the tables and
  returns a session factory. Both raise `ConfigError`.
- `hnex_api.repositories` – `UserRepository`, `AuthRepository`,
  `UploadRepository` over a session factory, `MemoryTokenCache` for
  refresh-token hashes, and `RecordNotFoundError`. Lookups skip
  soft-deleted rows; `UploadRepository.delete` soft-deletes.
- `hnex_api.middleware` – the decorator `access_token_required(view)`,
  which checks `Authorization: Bearer token` against `JWT_ACCESS_SECRET`
  and stores the claims on `flask.g.user`, and `get_user_ctx()`, which
  returns them or raises `UserContextError`.
- `hnex_api.auth_handlers` – `AuthHandler(repo, user_repo)` with
  `register`, `login`, `logout`, `refresh_token`, `google_auth` and
  `facebook_auth`.
- `hnex_api.user_handlers` – `UserHandler(repo)` with `get_user(user_id)`
  and `get_profile()`.

Handlers read the JSON body from `flask.request` and return a
`(body, status)` pair, so they run inside a Flask request. Successful
calls have `"code": 1`; failures carry `"code": 0` and a `msg`. The
Google and Facebook flows report failures under `error` instead.

Google and Facebook sign-in verify the token with the provider and then
issue tokens for an existing user whose `id` is the provider's user id;
they do not create accounts, and answer "Failed to find user" when there
is none.

## Configuration

| Variable                 | Meaning                                            |
|--------------------------|----------------------------------------------------|
| `NODE_ENV`               | `development` selects `DEV_DB_URL`; anything else selects `PROD_DB_URL` |
| `DEV_DB_URL`             | SQLAlchemy database URL used in development        |
| `PROD_DB_URL`            | SQLAlchemy database URL used otherwise             |
| `PORT`                   | Whole number, read into `Env.port`                 |
| `JWT_ACCESS_SECRET`      | Signing secret for access tokens                   |
| `JWT_REFRESH_SECRET`     | Signing secret for refresh tokens                  |
| `JWT_ACCESS_EXPIRES_IN`  | Access token lifetime, in seconds                  |
| `JWT_REFRESH_EXPIRES_IN` | Refresh token lifetime, in seconds                 |
| `GOOGLE_CLIENT_ID`       | Expected audience of Google ID tokens              |
| `FACEBOOK_APP_ID`        | Facebook application id                            |
| `FACEBOOK_APP_SECRET`    | Facebook application secret                        |

`load_env` raises `ConfigError` if the `.env` file is missing or `PORT`
is not a whole number; variables already set are not overridden. A
`postgres://` URL is accepted and read as `postgresql://`; the database
driver itself must be installed separately (SQLite needs none).

## Wiring the handlers

```python
from flask import Flask

from hnex_api.auth_handlers import AuthHandler
from hnex_api.config import connect_db, load_env
from hnex_api.middleware import access_token_required
from hnex_api.repositories import AuthRepository, MemoryTokenCache, UserRepository
from hnex_api.user_handlers import UserHandler

env = load_env()
session_factory = connect_db(env)
users = UserRepository(session_factory)
auth = AuthHandler(AuthRepository(session_factory, MemoryTokenCache()), users)
profiles = UserHandler(users)

app = Flask(__name__)
app.post("/api/auth/register")(auth.register)
app.post("/api/auth/login")(auth.login)
app.get("/api/auth/logout")(access_token_required(auth.logout))
app.post("/api/auth/refresh")(access_token_required(auth.refresh_token))
app.get("/api/users/profile")(access_token_required(profiles.get_profile))
app.get("/api/users/<user_id>")(profiles.get_user)
app.run(port=env.port)
```

`refresh_token` and `logout` take the user from the claims that
`access_token_required` stores, so they answer `401 Unauthorized`
unless wrapped by it.

## What is not included

The package has no ready-made application and no command that starts a
server: routes, static file serving and the port are left to the code
that uses it, as above. It has no request handlers for file uploads;
`UploadRepository`, `Upload` and `gen_unique_path` store and name
upload records, but receiving and saving the files is up to you.
Refresh-token hashes are kept in `MemoryTokenCache`, in process memory
only; any object with the same `get`, `set` and `delete` methods can
take its place.