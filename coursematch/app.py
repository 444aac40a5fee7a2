import logging

from flask import Flask, jsonify, request

from coursematch import config
from coursematch.errors import CUSTOM_ERRORS, MatchingError, ProblemFormatError
from coursematch.matching import solve
from coursematch.problem import build_problem, problem_from_rank_tables, read_table
from coursematch.stability import course_assignments

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = config.SECRET_KEY


def _response(problem, orientation):
    matching = solve(problem, orientation)
    assignments = {c.name: [] for c in problem.courses}
    assignments.update(course_assignments(matching))
    return jsonify({
        "success": True,
        "orientation": orientation,
        "matching": matching,
        "unmatched": [name for name, courses in matching.items() if not courses],
        "assignments": assignments,
    })


def _parse_solve_body(data):
    """Turn the /solve JSON body into preference mappings and capacities."""
    if not isinstance(data, dict):
        raise ProblemFormatError("Request body must be a JSON object")

    applicants = data.get("applicants", {})
    courses = data.get("courses", {})
    if not isinstance(applicants, dict) or not isinstance(courses, dict):
        raise ProblemFormatError("'applicants' and 'courses' must be objects keyed by name")
    for name, prefs in applicants.items():
        if not isinstance(prefs, list):
            raise ProblemFormatError(f"Preferences of applicant {name!r} must be a list")

    course_prefs, capacities = {}, {}
    for name, info in courses.items():
        if isinstance(info, list):
            course_prefs[name] = info
            continue
        if not isinstance(info, dict):
            raise ProblemFormatError(f"Course {name!r} must be a list or an object with 'prefs'")
        course_prefs[name] = info.get("prefs", [])
        if not isinstance(course_prefs[name], list):
            raise ProblemFormatError(f"Preferences of course {name!r} must be a list")
        if "capacity" in info:
            try:
                capacities[name] = int(info["capacity"])
            except (TypeError, ValueError):
                raise ProblemFormatError(f"Capacity of {name!r} is not an integer") from None

    return applicants, course_prefs, capacities


@app.errorhandler(MatchingError)
def handle_matching_error(e):
    status = CUSTOM_ERRORS.get(type(e), 400)
    logger.warning("Request failed (%d): %s", status, e)
    return jsonify({"success": False, "error": str(e)}), status


@app.route("/health")
def healthcheck():
    return jsonify({"status": "ok"})


@app.route("/solve", methods=["POST"])
def solve_problem():
    data = request.get_json(silent=True)
    if data is None:
        raise ProblemFormatError("Request body is not valid JSON")

    applicant_prefs, course_prefs, capacities = _parse_solve_body(data)
    orientation = data.get("orientation", config.DEFAULT_ORIENTATION)
    problem = build_problem(applicant_prefs, course_prefs, capacities)
    return _response(problem, orientation)


@app.route("/upload", methods=["POST"])
def upload_tables():
    f_applicants = request.files.get("applicants_file")
    f_courses = request.files.get("courses_file")
    if not f_applicants or not f_courses:
        raise ProblemFormatError("Both 'applicants_file' and 'courses_file' are required")

    orientation = request.form.get("orientation", config.DEFAULT_ORIENTATION)
    try:
        df_a = read_table(f_applicants)
        df_c = read_table(f_courses)
    except MatchingError:
        raise
    except Exception as e:
        logger.exception("Could not read uploaded tables")
        raise ProblemFormatError(f"Could not read uploaded tables: {e}") from e

    problem = problem_from_rank_tables(df_a, df_c)
    return _response(problem, orientation)


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    app.run(debug=True, port=config.PORT)
