"""
Back-office forms for products, customers and employees.
Bound to JSON request bodies by Flask-WTF.
"""
from decimal import Decimal

from flask import request
from flask_wtf import FlaskForm
from wtforms import DecimalField, IntegerField, PasswordField, SelectField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Email, InputRequired, Length, NumberRange, Optional

from retail_pos.exceptions import ValidationError

ROLE_CHOICES = [('cashier', 'Cashier'), ('admin', 'Admin')]


class ProductForm(FlaskForm):
    """Form for creating a product."""

    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=200)])
    category = StringField('Category', validators=[Optional(), Length(max=100)])
    barcode = StringField('Barcode', validators=[Optional(), Length(max=64)])
    stock = IntegerField(
        'Stock',
        validators=[Optional(), NumberRange(min=0, message='Stock cannot be negative')],
        default=0
    )
    purchase_price = DecimalField(
        'Purchase price',
        validators=[Optional(), NumberRange(min=0, message='Price cannot be negative')],
        places=2
    )
    sale_price = DecimalField(
        'Sale price',
        validators=[
            InputRequired(message='Sale price is required'),
            NumberRange(min=0, message='Price cannot be negative')
        ],
        places=2
    )


class ProductUpdateForm(ProductForm):
    """Partial update; every field optional."""

    name = StringField('Name', validators=[Optional(), Length(max=200)])
    sale_price = DecimalField(
        'Sale price',
        validators=[Optional(), NumberRange(min=0, message='Price cannot be negative')],
        places=2
    )


class CustomerForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=200)])
    phone = StringField('Phone', validators=[Optional(), Length(max=50)])
    address = TextAreaField('Address', validators=[Optional()])
    loan_balance = DecimalField('Loan balance', validators=[Optional()], places=2)


class CustomerUpdateForm(CustomerForm):
    name = StringField('Name', validators=[Optional(), Length(max=200)])


class EmployeeForm(FlaskForm):
    """Form for provisioning an employee and its login."""

    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=200)])
    email = StringField(
        'Email',
        validators=[DataRequired(message='Email is required'), Email(message='Invalid email'), Length(max=255)]
    )
    password = PasswordField(
        'Password',
        validators=[DataRequired(message='Password is required'), Length(min=8, message='Use at least 8 characters')]
    )
    role = SelectField('Role', choices=ROLE_CHOICES, default='cashier')


class EmployeeUpdateForm(FlaskForm):
    name = StringField('Name', validators=[Optional(), Length(max=200)])
    role = StringField('Role', validators=[Optional(), AnyOf([value for value, _ in ROLE_CHOICES])])


class LoginForm(FlaskForm):
    email = StringField('Email', validators=[DataRequired(message='Email is required')])
    password = PasswordField('Password', validators=[DataRequired(message='Password is required')])


def validate_form(form_class):
    """
    Bind the current request to a form and validate it.

    Raises:
        ValidationError: with the WTForms errors dict in the payload
    """
    form = form_class()
    if not form.validate():
        raise ValidationError('Invalid data', payload={'errors': form.errors})
    return form


def submitted_data(form, fields):
    """
    Data for the fields the client actually sent.

    Used for partial updates so that omitted fields keep their stored value.
    """
    sent = request.get_json(silent=True) or request.form
    data = {}
    for field in fields:
        if field not in sent:
            continue
        value = form[field].data
        if isinstance(value, Decimal):
            value = value.quantize(Decimal('0.01'))
        data[field] = value
    return data
