"""WTForms form classes."""

from __future__ import annotations

from datetime import date, timedelta

from flask_wtf import FlaskForm
from wtforms import (
    BooleanField,
    DateField,
    PasswordField,
    SelectField,
    SelectMultipleField,
    StringField,
    SubmitField,
    TextAreaField,
    TimeField,
)
from wtforms.validators import DataRequired, Email, Length, Optional, ValidationError

from shift_roster.models import LeaveStatus
from shift_roster.security import MIN_PASSWORD_LENGTH
from shift_roster.timeutils import local_today


def _strip(value: str | None) -> str | None:
    return value.strip() if value else value


def _in_a_week() -> date:
    return local_today() + timedelta(days=6)


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)], filters=[_strip])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=MIN_PASSWORD_LENGTH, max=255)])
    remember = BooleanField("Remember me")
    submit = SubmitField("Sign in")


class PersonForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=255)], filters=[_strip])
    phone = StringField("Phone", validators=[Optional(), Length(max=64)], filters=[_strip])
    designation = StringField("Designation", validators=[Optional(), Length(max=128)], filters=[_strip])
    role_ids = SelectMultipleField("Roles", choices=[], coerce=str, validate_choice=False)
    submit = SubmitField("Save person")


class RoleForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=128)], filters=[_strip])
    description = TextAreaField("Description", validators=[Optional(), Length(max=1000)])
    submit = SubmitField("Save role")


class GroupForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=128)], filters=[_strip])
    description = TextAreaField("Description", validators=[Optional(), Length(max=1000)])
    person_ids = SelectMultipleField("Members", choices=[], coerce=str, validate_choice=False)
    submit = SubmitField("Save group")


class LeaveForm(FlaskForm):
    person_id = SelectField("Person", choices=[], validators=[DataRequired()], coerce=str)
    start_date = DateField("From", validators=[DataRequired()], default=local_today)
    end_date = DateField("To", validators=[DataRequired()], default=local_today)
    reason = TextAreaField("Reason", validators=[Optional(), Length(max=500)])
    status = SelectField(
        "Status",
        choices=[(status.value, status.value.title()) for status in LeaveStatus],
        validators=[DataRequired()],
        default=LeaveStatus.PENDING.value,
    )
    submit = SubmitField("Save leave")

    def validate_end_date(self, field: DateField) -> None:
        if self.start_date.data and field.data and field.data < self.start_date.data:
            raise ValidationError("End date must be on or after start date.")


class ShiftTemplateForm(FlaskForm):
    """Role rows are posted as parallel ``role_id`` / ``required_count`` lists."""

    name = StringField("Name", validators=[DataRequired(), Length(max=128)], filters=[_strip])
    start_time = TimeField("Start time", validators=[DataRequired()])
    end_time = TimeField("End time", validators=[DataRequired()])
    submit = SubmitField("Save template")


class RosterForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=255)], filters=[_strip])
    start_date = DateField("Start date", validators=[DataRequired()], default=local_today)
    end_date = DateField("End date", validators=[DataRequired()], default=_in_a_week)
    submit = SubmitField("Save roster")

    def validate_end_date(self, field: DateField) -> None:
        if self.start_date.data and field.data and field.data < self.start_date.data:
            raise ValidationError("End date must be on or after start date.")


class RosterShiftForm(FlaskForm):
    template_id = SelectField("Template", choices=[], validators=[DataRequired()], coerce=str)
    date = DateField("Date", validators=[DataRequired()], default=local_today)
    submit = SubmitField("Add shift")


class RosterShiftEditForm(FlaskForm):
    date = DateField("Date", validators=[DataRequired()])
    submit = SubmitField("Save shift")


class ShiftForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=128)], filters=[_strip])
    date = DateField("Date", validators=[DataRequired()], default=local_today)
    start_time = TimeField("Start time", validators=[DataRequired()])
    end_time = TimeField("End time", validators=[DataRequired()])
    submit = SubmitField("Save shift")
