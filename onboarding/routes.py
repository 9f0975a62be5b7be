"""
Flask routes for the onboarding wizard API.

Each browser session owns one wizard. Field edits, step validation,
navigation and submission all act on that wizard's record.
"""

from flask import Blueprint, current_app, jsonify, request, session
from flask_wtf.csrf import generate_csrf

from onboarding import db
from onboarding.lookups import (
    DEPARTMENTS, JOB_TYPES, RELATIONSHIPS, managers_for_department, skills_for_department
)
from onboarding.review import build_review_summary
from onboarding.schemas import StepId
from onboarding.security import (
    get_client_ip, rate_limit_edit, rate_limit_navigate, rate_limit_submit,
    rate_limit_validate, sanitize_payload
)
from onboarding.utils import get_local_today, parse_date
from onboarding.validation import validate_payload
from onboarding.wizard import OnboardingWizard, SubmissionInProgress, WizardClosed


api_bp = Blueprint('api', __name__, url_prefix='/api')

WIZARD_SESSION_KEY = 'wizard_token'


def reference_today():
    """Today's date for validation, honouring a fixed reference date if configured."""
    fixed = parse_date(current_app.config.get('ONBOARDING_REFERENCE_DATE'))
    if fixed is not None:
        return fixed
    return get_local_today(current_app.config.get('ONBOARDING_TIMEZONE', 'UTC'))


def get_wizard() -> OnboardingWizard:
    """Wizard for the current session, starting one if needed."""
    store = current_app.extensions['wizard_store']
    wizard = store.get(session.get(WIZARD_SESSION_KEY))
    if wizard is None:
        token, wizard = store.create(clock=reference_today)
        session[WIZARD_SESSION_KEY] = token
        current_app.logger.info(f'Started onboarding wizard for {get_client_ip()}')
    return wizard


def error_response(message: str, code: str, status: int):
    return jsonify({
        'ok': False,
        'errors': [{'field': '', 'message': message, 'code': code}]
    }), status


def get_json_object():
    """Sanitized JSON object body, or None if the body is not an object."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None
    return sanitize_payload(payload)


def wizard_closed_response():
    return error_response('This onboarding record has already been submitted', 'wizard_closed', 409)


# Lookups

@api_bp.route('/csrf-token', methods=['GET'])
def api_csrf_token():
    """Issue a CSRF token for subsequent write requests."""
    return jsonify({'ok': True, 'csrf_token': generate_csrf()})


@api_bp.route('/lookups', methods=['GET'])
def api_lookups():
    return jsonify({
        'ok': True,
        'departments': DEPARTMENTS,
        'job_types': JOB_TYPES,
        'relationships': RELATIONSHIPS,
    })


@api_bp.route('/lookups/managers', methods=['GET'])
def api_managers():
    """Managers available for the given department."""
    department = request.args.get('department', '')
    return jsonify({
        'ok': True,
        'managers': [m.to_dict() for m in managers_for_department(department)],
    })


@api_bp.route('/lookups/skills', methods=['GET'])
def api_skills():
    """Skill catalog for the given department."""
    department = request.args.get('department', '')
    return jsonify({'ok': True, 'skills': skills_for_department(department)})


# Stateless validation

@api_bp.route('/validate', methods=['POST'])
@rate_limit_validate()
def api_validate():
    """
    Validate a complete onboarding record without a wizard.

    Returns:
        JSON response with validation result
    """
    payload = get_json_object()
    if payload is None:
        return error_response('No JSON payload provided', 'missing_payload', 400)

    result = validate_payload(payload, reference_today())
    if result.is_valid:
        return jsonify(result.to_dict()), 200
    return jsonify(result.to_dict()), 422


# Wizard state

@api_bp.route('/wizard', methods=['GET'])
def api_wizard_state():
    wizard = get_wizard()
    return jsonify({'ok': True, 'wizard': wizard.to_dict()})


@api_bp.route('/wizard', methods=['DELETE'])
def api_wizard_abandon():
    """Abandon the current wizard and its record."""
    current_app.extensions['wizard_store'].discard(session.pop(WIZARD_SESSION_KEY, None))
    return jsonify({'ok': True})


@api_bp.route('/wizard/record', methods=['PATCH'])
@rate_limit_edit()
def api_update_record():
    """
    Write one or more fields.

    Body is an object of field path to value, e.g.
    ``{"department": "HR", "preferred_working_hours.start": "08:30"}``.
    """
    payload = get_json_object()
    if payload is None:
        return error_response('No JSON payload provided', 'missing_payload', 400)

    wizard = get_wizard()
    if wizard.submitted:
        return wizard_closed_response()

    try:
        wizard.record.update(payload)
    except KeyError as e:
        return error_response(f'Unknown field or unselected skill: {e.args[0]}', 'unknown_field', 400)
    except ValueError as e:
        return error_response(str(e), 'invalid_value', 400)

    return jsonify({'ok': True, 'record': wizard.record.to_dict()})


@api_bp.route('/wizard/skills', methods=['POST'])
@rate_limit_edit()
def api_toggle_skill():
    """Select or deselect a primary skill: ``{"skill": "Python", "selected": true}``."""
    payload = get_json_object()
    if payload is None or not isinstance(payload.get('skill'), str) or not payload['skill']:
        return error_response('A skill is required', 'missing_skill', 400)

    wizard = get_wizard()
    if wizard.submitted:
        return wizard_closed_response()

    wizard.record.toggle_skill(payload['skill'], payload.get('selected') is not False)
    return jsonify({
        'ok': True,
        'primary_skills': wizard.record.primary_skills,
        'skill_experience': wizard.record.skill_experience,
    })


@api_bp.route('/wizard/skills/<path:skill>/experience', methods=['PUT'])
@rate_limit_edit()
def api_skill_experience(skill: str):
    """Set years of experience for a selected skill: ``{"years": 3}``."""
    payload = get_json_object()
    if payload is None or 'years' not in payload:
        return error_response('Years of experience is required', 'missing_years', 400)

    wizard = get_wizard()
    if wizard.submitted:
        return wizard_closed_response()

    try:
        wizard.record.set_skill_experience(skill, payload['years'])
    except KeyError:
        return error_response(f'{skill} is not a selected skill', 'unselected_skill', 400)

    return jsonify({'ok': True, 'skill_experience': wizard.record.skill_experience})


# Validation and navigation

@api_bp.route('/wizard/validate', methods=['POST'])
@rate_limit_validate()
def api_validate_step():
    """Validate the current step, or ``?step=N``, without navigating."""
    wizard = get_wizard()
    step = request.args.get('step', type=int) or wizard.current_step
    if step not in [s.value for s in StepId]:
        return error_response('Unknown step', 'unknown_step', 400)

    result = wizard.validate_step(step)
    return jsonify(result.to_dict()), (200 if result.is_valid else 422)


@api_bp.route('/wizard/advance', methods=['POST'])
@rate_limit_navigate()
def api_advance():
    wizard = get_wizard()
    step = int(wizard.current_step)
    try:
        result = wizard.advance()
    except WizardClosed:
        return wizard_closed_response()

    if not result.is_valid:
        current_app.logger.info(f'Step {step} blocked with {len(result.errors)} error(s)')
        return jsonify({**result.to_dict(), 'wizard': wizard.to_dict()}), 422

    current_app.logger.info(f'Step {step} completed, now on step {int(wizard.current_step)}')
    return jsonify({**result.to_dict(), 'wizard': wizard.to_dict()}), 200


@api_bp.route('/wizard/retreat', methods=['POST'])
@rate_limit_navigate()
def api_retreat():
    wizard = get_wizard()
    try:
        moved = wizard.retreat()
    except WizardClosed:
        return wizard_closed_response()

    if not moved:
        return error_response('Already on the first step', 'navigation_rejected', 409)
    return jsonify({'ok': True, 'wizard': wizard.to_dict()})


@api_bp.route('/wizard/jump/<int:step>', methods=['POST'])
@rate_limit_navigate()
def api_jump(step: int):
    wizard = get_wizard()
    try:
        moved = wizard.jump_to(step)
    except WizardClosed:
        return wizard_closed_response()

    if not moved:
        return error_response(
            'Complete the previous steps before moving ahead', 'navigation_rejected', 409
        )
    return jsonify({'ok': True, 'wizard': wizard.to_dict()})


@api_bp.route('/wizard/review', methods=['GET'])
def api_review():
    wizard = get_wizard()
    summary = build_review_summary(wizard.record, wizard.today())
    return jsonify({'ok': True, 'summary': summary.to_dict()})


# Submission

@api_bp.route('/wizard/submit', methods=['POST'])
@rate_limit_submit()
def api_submit():
    """
    Validate the whole record and hand it to the submission collaborator.

    Returns:
        200 on success, 422 when validation blocks submission,
        409 when a submission is already pending, 502 on collaborator failure
    """
    wizard = get_wizard()
    submitter = current_app.extensions['onboarding_submitter']

    try:
        outcome = wizard.submit(submitter)
    except WizardClosed:
        return wizard_closed_response()
    except SubmissionInProgress:
        return error_response('A submission is already in progress', 'submission_in_progress', 409)

    body = {**outcome.to_dict(), 'wizard': wizard.to_dict()}
    if outcome.status == 'submitted':
        current_app.logger.info(f'Onboarding record submitted as {outcome.receipt.submission_id}')
        return jsonify(body), 200
    if outcome.status == 'failed':
        current_app.logger.error(f'Submission failed: {outcome.reason}')
        return jsonify(body), 502

    current_app.logger.info('Submission blocked by validation')
    return jsonify(body), 422


@api_bp.route('/wizard/restart', methods=['POST'])
def api_restart():
    """Start a new onboarding record from step 1."""
    wizard = get_wizard()
    wizard.restart()
    return jsonify({'ok': True, 'wizard': wizard.to_dict()})


# Error handlers
@api_bp.app_errorhandler(404)
def not_found(error):
    """Handle 404 errors, including unmatched API paths."""
    return jsonify({'ok': False, 'error': 'Not found'}), 404


@api_bp.errorhandler(500)
def internal_error(error):
    """Handle 500 errors."""
    db.session.rollback()
    return jsonify({'ok': False, 'error': 'Internal server error'}), 500


@api_bp.errorhandler(429)
def rate_limit_handler(error):
    """Handle rate limit errors."""
    return jsonify({
        'ok': False,
        'error': 'Rate limit exceeded. Please try again later.'
    }), 429
