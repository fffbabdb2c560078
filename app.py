import logging
import os
import random
import uuid
from collections import OrderedDict

from flask import Flask, jsonify, render_template, request, redirect, url_for, session

from sortviz import SortVizError, InvalidInputError
from sortviz.player import view_at
from sortviz.service import (
    ALGORITHMS,
    algorithm_info,
    execute,
    list_algorithms,
    parse_array_text,
    validate_array,
)
from sortviz.trace import AlgorithmKind
from sortviz.tree import build_recursion_tree

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.from_mapping(
    SECRET_KEY=os.environ.get("SORTVIZ_SECRET_KEY", "replace-with-a-random-secret"),  # change for production
    MAX_ARRAY_SIZE=int(os.environ.get("SORTVIZ_MAX_ARRAY_SIZE", "20")),
    DEFAULT_SPEED=0.5,
    DEFAULT_ALGORITHM=AlgorithmKind.MERGE_SORT.value,
    MAX_RUNS=int(os.environ.get("SORTVIZ_MAX_RUNS", "100")),
)

# In-memory store (OK for local demo), oldest runs evicted past MAX_RUNS
RUNS = OrderedDict()

# ---------------- Utilities ----------------
def clamp(value, low, high):
    return max(low, min(value, high))


def store_run(result, autoplay=False, speed=None):
    """Keep a finished run in RUNS and return its id."""
    run_id = str(uuid.uuid4())
    RUNS[run_id] = {
        "algo": result.trace.algorithm.value,
        "result": result,
        "index": 0,
        "autoplay": autoplay,
        "speed": speed if speed is not None else app.config["DEFAULT_SPEED"],  # seconds per step
        "size": len(result.trace.original_array),
    }
    while len(RUNS) > app.config["MAX_RUNS"]:
        evicted, _ = RUNS.popitem(last=False)
        logger.debug("Evicted run %s", evicted)
    logger.info("Stored run %s (%s, %d steps)", run_id, result.trace.algorithm.value, len(result.trace.steps))
    return run_id


def tree_levels(trace, idx):
    """Group the merge sort recursion tree by level for the template."""
    levels = {}
    root = build_recursion_tree(trace)
    for node in root.iter_nodes():
        levels.setdefault(node.level, []).append({
            "range": node.range,
            "values": node.display_array(idx),
            "active": node.is_active(idx),
            "merged": node.is_merged(idx),
        })
    return [levels[level] for level in sorted(levels)]


def json_error(message, status, errors=None):
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


# ---------------- HTML routes ----------------
@app.route("/", methods=["GET"])
def index():
    return render_template(
        "index.html",
        algos=ALGORITHMS,
        max_size=app.config["MAX_ARRAY_SIZE"],
        default_algo=app.config["DEFAULT_ALGORITHM"],
        errors=[],
    )


@app.route("/start", methods=["POST"])
def start():
    algo = request.form.get("algorithm", app.config["DEFAULT_ALGORITHM"])
    max_size = app.config["MAX_ARRAY_SIZE"]

    # speed from form is in SECONDS; allow 0.05 .. 2.00 seconds
    try:
        speed = float(request.form.get("speed", app.config["DEFAULT_SPEED"]))
    except ValueError:
        speed = app.config["DEFAULT_SPEED"]
    speed = clamp(speed, 0.05, 2.0)
    autoplay = request.form.get("autoplay") == "on"

    text = request.form.get("values", "").strip()
    errors = []
    if text:
        try:
            arr = parse_array_text(text)
        except InvalidInputError as exc:
            arr = []
            errors.append(str(exc))
    else:
        # no values given: random data of the requested size
        try:
            size = int(request.form.get("size", "8"))
        except ValueError:
            size = 8
        arr = [random.randint(1, 99) for _ in range(clamp(size, 1, max_size))]

    if algo not in ALGORITHMS:
        errors.append("Unsupported algorithm")
    if not errors:
        errors = validate_array(arr, max_size)
    if errors:
        logger.warning("Rejected run request: %s", "; ".join(errors))
        return render_template(
            "index.html", algos=ALGORITHMS, max_size=max_size, default_algo=algo, errors=errors
        ), 400

    result = execute(algo, arr)
    session["run_id"] = store_run(result, autoplay=autoplay, speed=speed)
    return redirect(url_for("view"))


@app.route("/view", methods=["GET"])
def view():
    run_id = session.get("run_id")
    if not run_id or run_id not in RUNS:
        return redirect(url_for("index"))

    run = RUNS[run_id]
    trace = run["result"].trace
    idx = clamp(run["index"], 0, len(trace.steps) - 1)
    run["index"] = idx
    frame = view_at(trace, idx)
    title, _ = ALGORITHMS[run["algo"]]
    levels = tree_levels(trace, idx) if trace.algorithm is AlgorithmKind.MERGE_SORT else []

    # view.html uses `autoplay` and `speed` to add meta-refresh
    return render_template(
        "view.html",
        title=title,
        idx=idx,
        total=len(trace.steps),
        frame=frame,
        levels=levels,
        autoplay=run["autoplay"] and not frame.is_last,
        speed=run["speed"],
        algo_key=run["algo"],
        size=run["size"],
        complexity=run["result"].complexity if frame.is_last else None,
    )


@app.route("/advance", methods=["POST", "GET"])
def advance():
    # GET is used by meta refresh; POST by buttons (Prev/Next)
    run_id = session.get("run_id")
    if not run_id or run_id not in RUNS:
        return redirect(url_for("index"))
    run = RUNS[run_id]
    last = len(run["result"].trace.steps) - 1
    direction = request.values.get("dir", "next")  # next, prev, first, last, seek, toggle_auto
    if direction == "next":
        run["index"] = min(run["index"] + 1, last)
    elif direction == "prev":
        run["index"] = max(run["index"] - 1, 0)
    elif direction == "first":
        run["index"] = 0
    elif direction == "last":
        run["index"] = last
    elif direction == "seek":
        try:
            run["index"] = clamp(int(request.values.get("step", "0")), 0, last)
        except ValueError:
            pass
    elif direction == "toggle_auto":
        run["autoplay"] = not run["autoplay"]
        # replaying a finished run starts over
        if run["autoplay"] and run["index"] == last:
            run["index"] = 0
    return redirect(url_for("view"))


@app.route("/reset", methods=["POST"])
def reset():
    run_id = session.get("run_id")
    if run_id in RUNS:
        del RUNS[run_id]
        logger.info("Dropped run %s", run_id)
    session.pop("run_id", None)
    return redirect(url_for("index"))


# ---------------- JSON API ----------------
@app.route("/api/algorithms", methods=["GET"])
def api_algorithms():
    data = list_algorithms()
    return jsonify({"success": True, "data": data, "count": len(data)})


@app.route("/api/algorithms/<algorithm_id>", methods=["GET"])
def api_algorithm_info(algorithm_id):
    info = algorithm_info(algorithm_id)
    if info is None:
        return json_error("Algorithm not found", 404)
    return jsonify({"success": True, "data": info})


@app.route("/api/algorithms/execute", methods=["POST"])
def api_execute():
    payload = request.get_json(silent=True) or {}
    algo = payload.get("algorithm")
    arr = payload.get("array")
    if not algo or arr is None:
        return json_error("Invalid input. Algorithm and array are required.", 400)
    if algo not in ALGORITHMS:
        return json_error("Unsupported algorithm", 400)
    errors = validate_array(arr, app.config["MAX_ARRAY_SIZE"])
    if errors:
        logger.warning("Rejected execute request: %s", "; ".join(errors))
        return json_error("Validation failed", 400, errors)

    try:
        result = execute(algo, arr)
    except SortVizError:
        logger.exception("Algorithm execution failed")
        return json_error("Error executing algorithm", 500)

    data = result.to_dict()
    data["runId"] = store_run(result)
    return jsonify({"success": True, "data": data})


@app.route("/api/algorithms/validate", methods=["POST"])
def api_validate():
    payload = request.get_json(silent=True) or {}
    arr = payload.get("array")
    errors = validate_array(arr, app.config["MAX_ARRAY_SIZE"])
    if errors:
        return json_error("Validation failed", 400, errors)
    return jsonify({
        "success": True,
        "message": "Array is valid",
        "data": {"length": len(arr), "min": min(arr), "max": max(arr), "sorted": sorted(arr)},
    })


@app.route("/api/runs/<run_id>/steps/<int:k>", methods=["GET"])
def api_step(run_id, k):
    run = RUNS.get(run_id)
    if run is None:
        return json_error("Run not found", 404)
    try:
        frame = view_at(run["result"].trace, k)
    except IndexError as exc:
        return json_error(str(exc), 404)
    return jsonify({"success": True, "data": frame.to_dict()})


@app.route("/api/runs/<run_id>/tree", methods=["GET"])
def api_tree(run_id):
    run = RUNS.get(run_id)
    if run is None:
        return json_error("Run not found", 404)
    try:
        root = build_recursion_tree(run["result"].trace)
    except InvalidInputError as exc:
        return json_error(str(exc), 400)
    return jsonify({"success": True, "data": root.to_dict()})


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    # Host locally; debug=True for development
    app.run(debug=True)
