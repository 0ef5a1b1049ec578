"""VulnLab: deliberately weak JSON API for APIChecker testing.

Every probe has something to find here: a login endpoint with no lockout,
weak accounts and chatty errors, an injectable user lookup backed by a real
SQLite database, a comment endpoint that echoes raw input, wildcard CORS,
no security headers and a handful of files that should never be served.
"""

import sqlite3

from flask import Flask, Response, g, jsonify, request

app = Flask(__name__)

ACCOUNTS = {
    "admin": "admin",
    "testuser": "testpass",
    "alice": "alice2024",
}

# ── Database helpers ────────────────────────────────────────────

_SEED = [
    (1, "admin", "admin@vulnlab.local", "admin"),
    (2, "alice", "alice@vulnlab.local", "user"),
    (3, "bob", "bob@vulnlab.local", "user"),
    (4, "secret_flag", "flag{sql1_d3t3ct3d}", "flag"),
]


def get_db():
    """Per-request in-memory SQLite connection, seeded on first use."""
    if "db" not in g:
        g.db = sqlite3.connect(":memory:")
        g.db.row_factory = sqlite3.Row
        g.db.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, "
                     "email TEXT, role TEXT DEFAULT 'user')")
        g.db.executemany("INSERT INTO users VALUES (?,?,?,?)", _SEED)
    return g.db


@app.teardown_appcontext
def close_db(exc):
    db = g.pop("db", None)
    if db:
        db.close()


# ── Response decoration ─────────────────────────────────────────

@app.after_request
def weak_headers(resp):
    # VULNERABLE: any origin, with credentials; no security headers at all
    resp.headers["Access-Control-Allow-Origin"] = "*"
    resp.headers["Access-Control-Allow-Credentials"] = "true"
    resp.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
    resp.headers["Access-Control-Allow-Headers"] = "*"
    resp.headers["X-Powered-By"] = "Flask/VulnLab"
    return resp


# ══════════════════════════════════════════════════════════════════
#  Login: no rate limit, weak accounts, user enumeration
# ══════════════════════════════════════════════════════════════════

@app.route("/login", methods=["POST"])
def login():
    body = request.get_json(silent=True) or {}
    username = str(body.get("username", ""))
    password = str(body.get("password", ""))
    if not username or not password:
        return jsonify(error="Missing credentials"), 400

    # VULNERABLE: usernames compared case-insensitively
    expected = ACCOUNTS.get(username.lower())
    if expected is None:
        # VULNERABLE: tells the caller the account does not exist
        return jsonify(error="User not found"), 401
    if password != expected:
        return jsonify(error="Invalid password"), 401
    return jsonify(message="Login successful", user=username.lower())


# ══════════════════════════════════════════════════════════════════
#  API: no rate limit
# ══════════════════════════════════════════════════════════════════

@app.route("/api")
def api_root():
    return jsonify(name="VulnLab API", version="0.1")


# ══════════════════════════════════════════════════════════════════
#  SQLi: user lookup by raw string interpolation
# ══════════════════════════════════════════════════════════════════

@app.route("/api/users")
def users():
    id_val = request.args.get("id", "")
    db = get_db()
    if not id_val:
        rows = db.execute("SELECT id, name FROM users").fetchall()
        return jsonify([dict(r) for r in rows])

    # VULNERABLE: raw string interpolation in SQL query
    query = f"SELECT * FROM users WHERE id = '{id_val}'"
    try:
        rows = db.execute(query).fetchall()
    except sqlite3.Error as e:
        # VULNERABLE: leaking SQL error messages
        return jsonify(error=f"You have an error in your SQL syntax: {e}",
                       query=query), 500
    return jsonify([dict(r) for r in rows])


# ══════════════════════════════════════════════════════════════════
#  XSS: comment echoed back as HTML
# ══════════════════════════════════════════════════════════════════

@app.route("/api/comments", methods=["POST"])
def comments():
    body = request.get_json(silent=True) or {}
    # VULNERABLE: user input rendered inside HTML without escaping
    html = "".join(f"<p><b>{k}</b>: {v}</p>" for k, v in body.items())
    return Response(f"<div class=\"comments\">{html}</div>", mimetype="text/html")


# ══════════════════════════════════════════════════════════════════
#  Exposed files and panels
# ══════════════════════════════════════════════════════════════════

@app.route("/.env")
def dotenv():
    return Response("DATABASE_URL=sqlite:///vulnlab.db\nSECRET_KEY=secret\n",
                    mimetype="text/plain")


@app.route("/admin")
def admin():
    return Response("<h1>Admin panel</h1>", mimetype="text/html")


@app.route("/debug")
def debug():
    return jsonify(debug=True, accounts=len(ACCOUNTS))


# ══════════════════════════════════════════════════════════════════
#  Main
# ══════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    print("\n  🔓 VulnLab starting on http://127.0.0.1:5000\n")
    app.run(host="127.0.0.1", port=5000)
