from flask import jsonify, request
from garageguru.buisness.jobs.job_lifecycle_manager import JobLifecycleManager
from garageguru.presentation.routes.api import api_bp
from garageguru.presentation.routes.api.security import garage_access_required
from garageguru.presentation.schemas import JobCardCreate, JobCardUpdate, parse_payload, patch_from


@api_bp.get('/garages/<garage_id>/job-cards')
@garage_access_required
def list_job_cards(garage_id):
    status = request.args.get('status', type=str)
    return jsonify([j.to_dict() for j in JobLifecycleManager.list(garage_id, status)])


@api_bp.post('/garages/<garage_id>/job-cards')
@garage_access_required
def create_job_card(garage_id):
    payload = parse_payload(JobCardCreate)
    job_card = JobLifecycleManager.create(
        garage_id,
        {
            'name': payload.customer_name,
            'phone': payload.phone,
            'bike_number': payload.bike_number,
        },
        payload.complaint,
        [line.model_dump() for line in payload.spare_parts],
        payload.service_charge,
    )
    return jsonify(job_card.to_dict()), 201


@api_bp.get('/garages/<garage_id>/job-cards/<job_card_id>')
@garage_access_required
def get_job_card(garage_id, job_card_id):
    return jsonify(JobLifecycleManager.get(job_card_id, garage_id).to_dict())


@api_bp.put('/garages/<garage_id>/job-cards/<job_card_id>')
@garage_access_required
def update_job_card(garage_id, job_card_id):
    patch = patch_from(parse_payload(JobCardUpdate))
    job_card = JobLifecycleManager.update(job_card_id, garage_id, patch)
    return jsonify(job_card.to_dict())
