from flask import jsonify, request
from flask_login import current_user, login_required

from habitat_app.core.exceptions import ValidationError

from . import gamification_api_bp
from . import interface


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


@gamification_api_bp.route('/units/<unit_id>/attempts', methods=['POST'])
@login_required
def submit_attempt_api(unit_id):
    """Score an attempt; the first pass records the completion."""
    data = _json_body()
    answers = data.get('answers')
    grade = data.get('grade')

    if answers is not None and not isinstance(answers, dict):
        raise ValidationError('answers must be an object keyed by item id', errors={'answers': 'object'})
    if grade is not None and not isinstance(grade, dict):
        raise ValidationError('grade must be an object', errors={'grade': 'object'})

    outcome = interface.submit_attempt(current_user.user_id, unit_id, answers=answers, grade=grade)
    return jsonify({'success': True, **outcome.to_dict()})


@gamification_api_bp.route('/units/<unit_id>/completion', methods=['GET'])
@login_required
def get_completion_api(unit_id):
    completed = interface.is_unit_completed(current_user.user_id, unit_id)
    return jsonify({'success': True, 'unit_id': unit_id, 'completed': completed})


@gamification_api_bp.route('/progress', methods=['GET'])
@login_required
def get_progress_api():
    """Progress, Green Scale level, ecosystem badges, streak and risk flag."""
    dashboard = interface.get_dashboard(current_user.user_id)
    return jsonify({'success': True, **dashboard})


@gamification_api_bp.route('/assessment/tier', methods=['POST'])
@login_required
def assess_tier_api():
    result = interface.assess_tier(_json_body())
    return jsonify({'success': True, **result})


@gamification_api_bp.route('/challenges/active', methods=['GET'])
@login_required
def get_active_challenges_api():
    challenges = interface.get_active_challenges(current_user.user_id)
    return jsonify({'success': True, 'challenges': challenges})


@gamification_api_bp.route('/species', methods=['GET'])
@login_required
def get_adopted_species_api():
    species = interface.get_adopted_species(current_user.user_id)
    return jsonify({'success': True, 'species': species})


@gamification_api_bp.route('/leaderboard', methods=['GET'])
@login_required
def get_leaderboard_api():
    timeframe = request.args.get('timeframe', 'all_time')
    limit = request.args.get('limit', type=int)

    data = interface.get_leaderboard(timeframe, limit=limit)
    for item in data:
        item['is_current'] = (item.get('user_id') == current_user.user_id)

    return jsonify({
        'success': True,
        'leaderboard': data,
        'timeframe': timeframe
    })
