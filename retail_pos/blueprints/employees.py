"""Employees blueprint - staff management for admins."""
from flask import Blueprint, jsonify
from retail_pos.database import get_session
from retail_pos.forms.pos_forms import EmployeeForm, EmployeeUpdateForm, validate_form
from retail_pos.middleware import require_login, require_role
from retail_pos.services import employee_service

employees_bp = Blueprint('employees', __name__, url_prefix='/employees')


@employees_bp.route('/', methods=['GET'])
@require_login
@require_role('admin')
def list_employees():
    employees = employee_service.list_employees(get_session())
    return jsonify({'employees': [e.to_dict() for e in employees]})


@employees_bp.route('/', methods=['POST'])
@require_login
@require_role('admin')
def create_employee():
    """Provision the login and the employee profile together."""
    form = validate_form(EmployeeForm)
    employee = employee_service.create_employee(
        get_session(),
        name=form.name.data.strip(),
        email=form.email.data,
        password=form.password.data,
        role=form.role.data
    )
    return jsonify(employee.to_dict()), 201


@employees_bp.route('/<int:employee_id>', methods=['PUT'])
@require_login
@require_role('admin')
def update_employee(employee_id):
    form = validate_form(EmployeeUpdateForm)
    employee = employee_service.update_employee(
        get_session(), employee_id, name=form.name.data, role=form.role.data
    )
    return jsonify(employee.to_dict())


@employees_bp.route('/<int:employee_id>', methods=['DELETE'])
@require_login
@require_role('admin')
def delete_employee(employee_id):
    employee_service.delete_employee(get_session(), employee_id)
    return jsonify({'status': 'success'})
