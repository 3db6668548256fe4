from django import forms

from tgspain.apps.events.models import TicketType
from tgspain.libs import validation


class RegistrationForm(forms.Form):
    ticket_type = forms.ModelChoiceField(queryset=TicketType.objects.none(),
                                         label="Tipo de entrada",
                                         empty_label=None,
                                         widget=forms.RadioSelect)
    first_name = forms.CharField(label="Nombre", max_length=100)
    last_name = forms.CharField(label="Apellidos", max_length=100)
    email = forms.EmailField(label="Email")
    dni = forms.CharField(label="DNI/NIE", max_length=15, required=False)
    phone = forms.CharField(label="Teléfono", max_length=30, required=False)
    tg_email = forms.EmailField(label="Email de Technovation", required=False)
    team_name = forms.CharField(label="Equipo", max_length=200, required=False)
    data_consent = forms.BooleanField(
        label="Acepto el tratamiento de mis datos para la gestión del evento")
    image_consent = forms.BooleanField(
        label="Autorizo el uso de imágenes tomadas durante el evento",
        required=False)

    def __init__(self, *args, **kwargs):
        event = kwargs.pop("event")
        super(RegistrationForm, self).__init__(*args, **kwargs)
        self.fields["ticket_type"].queryset = event.ticket_types.filter(is_active=True)

    def clean_dni(self):
        dni = validation.clean_dni(self.cleaned_data.get("dni"), required=False)
        if dni is None:
            raise forms.ValidationError("El DNI/NIE no es válido")
        return dni


class CompanionForm(forms.Form):
    first_name = forms.CharField(label="Nombre", max_length=100)
    last_name = forms.CharField(label="Apellidos", max_length=100)
    dni = forms.CharField(label="DNI/NIE", max_length=15, required=False)
    relationship = forms.CharField(label="Relación", max_length=50, required=False)

    def clean_dni(self):
        dni = validation.clean_dni(self.cleaned_data.get("dni"), required=False)
        if dni is None:
            raise forms.ValidationError("El DNI/NIE no es válido")
        return dni


CompanionFormSet = forms.formset_factory(CompanionForm, extra=0, max_num=10,
                                         validate_max=True)


def companion_data(formset):
    return [form.cleaned_data for form in formset
            if form.cleaned_data and not form.cleaned_data.get("DELETE")]


class EventEmailForm(forms.Form):
    subject = forms.CharField(label="Asunto", max_length=200)
    body = forms.CharField(label="Mensaje", widget=forms.Textarea)
    include_checked_in = forms.BooleanField(label="Incluir asistentes ya validados",
                                            required=False, initial=True)
