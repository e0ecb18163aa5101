# payportal/controllers/payment_controller.py
"""Payment Controller for the PayPortal client portal
JSON endpoints for creating and tracking international transfers
"""
from flask import Blueprint, g, jsonify

from payportal.controllers.auth_controller import json_body
from payportal.services.payment_service import (
    SUPPORTED_CURRENCIES,
    SUPPORTED_PROVIDERS,
    PaymentService,
)
from payportal.utils.decorators import login_required

payments_bp = Blueprint('payments', __name__)


@payments_bp.route('/create', methods=['POST'])
@login_required
def create_payment():
    """CREATE: new transfer for the session user"""
    payment = PaymentService.create_payment(g.current_user, json_body())
    return jsonify({
        'message': 'Payment transaction created successfully',
        'transactionId': payment.transaction_id,
        'payment': payment.to_summary(),
    }), 201


@payments_bp.route('/my-payments', methods=['GET'])
@login_required
def my_payments():
    payments = PaymentService.payments_for(g.current_user)
    return jsonify({
        'payments': [payment.to_dict() for payment in payments],
        'count': len(payments),
    })


@payments_bp.route('/<transaction_id>', methods=['GET'])
@login_required
def get_payment(transaction_id):
    payment = PaymentService.get_payment(g.current_user, transaction_id)
    return jsonify({'payment': payment.to_dict()})


@payments_bp.route('/<transaction_id>/status', methods=['PATCH'])
@login_required
def update_status(transaction_id):
    """UPDATE: payment processing status"""
    payment = PaymentService.update_status(g.current_user, transaction_id,
                                           json_body().get('status'))
    return jsonify({
        'message': 'Payment status updated successfully',
        'payment': {
            'transactionId': payment.transaction_id,
            'status': payment.status,
            'updatedAt': payment.updated_at.isoformat(),
        },
    })


@payments_bp.route('/currencies/supported', methods=['GET'])
def supported_currencies():
    return jsonify({'currencies': SUPPORTED_CURRENCIES})


@payments_bp.route('/providers/supported', methods=['GET'])
def supported_providers():
    return jsonify({'providers': SUPPORTED_PROVIDERS})
