from django import forms

from tgspain.apps.core.models import Hub, PlatformSettings, Profile
from tgspain.libs import validation
from tgspain.libs.data_import import CsvWorkbook, InvalidWorkbookException
from tgspain.libs.data_import.import_teams import REQUIRED_HEADERS as TEAM_HEADERS
from tgspain.libs.data_import.import_users import REQUIRED_HEADERS as USER_HEADERS


class SettingsForm(forms.Form):
    def __init__(self, *args, **kwargs):
        settings_to_import = kwargs.pop("settings")
        self.settings = settings_to_import

        super(SettingsForm, self).__init__(*args, **kwargs)

        for setting in self.settings:
            field_name = f"setting_{setting['name']}"
            label = setting["name"].replace("_", " ").capitalize()

            if setting.get("type") == "boolean":
                self.fields[field_name] = forms.BooleanField(
                    label=label,
                    help_text=setting["description"],
                    initial=setting["value"],
                    required=False,
                )
            elif setting.get("type") == "choice":
                self.fields[field_name] = forms.TypedChoiceField(
                    label=label,
                    help_text=setting["description"],
                    choices=[(c[0], c[1]) for c in setting.get("choices", [])],
                    initial=setting["value"],
                    coerce=int,
                )
            elif setting.get("type") == "text":
                self.fields[field_name] = forms.CharField(
                    label=label,
                    help_text=setting["description"],
                    initial=setting["value"],
                    required=False,
                )
            else:
                self.fields[field_name] = forms.IntegerField(
                    label=label,
                    help_text=setting["description"],
                    initial=setting["value"],
                    min_value=setting.get("min", 0),
                )

    def save(self):
        for setting in self.settings:
            field = f"setting_{setting['name']}"
            if setting.get("type") == "boolean":
                value_to_set = 1 if self.cleaned_data[field] else 0
            else:
                value_to_set = self.cleaned_data[field]
            PlatformSettings.set(setting["name"], value_to_set)


class OnboardingForm(forms.ModelForm):
    date_of_birth = forms.DateField(label="Fecha de nacimiento",
                                    widget=forms.DateInput(attrs={"type": "date"}))
    hub = forms.ModelChoiceField(queryset=Hub.objects.all(), label="Hub")

    class Meta:
        model = Profile
        fields = ("first_name", "last_name", "date_of_birth", "dni", "phone",
                  "postal_code", "city", "state", "hub", "school_name",
                  "parent_name", "parent_email")
        labels = {
            "first_name": "Nombre",
            "last_name": "Apellidos",
            "dni": "DNI/NIE",
            "phone": "Teléfono",
            "postal_code": "Código postal",
            "city": "Ciudad",
            "state": "Provincia",
            "school_name": "Centro educativo",
            "parent_name": "Nombre de la madre, padre o tutor",
            "parent_email": "Email de la madre, padre o tutor",
        }

    def __init__(self, *args, **kwargs):
        super(OnboardingForm, self).__init__(*args, **kwargs)
        for name in Profile.REQUIRED_FIELDS:
            self.fields[name].required = True

    def clean_dni(self):
        dni = validation.clean_dni(self.cleaned_data.get("dni"))
        if dni is None:
            raise forms.ValidationError("El DNI/NIE no es válido")
        return dni

    def clean(self):
        cleaned_data = super(OnboardingForm, self).clean()
        threshold = int(PlatformSettings.get("minor_age_threshold",
                                             validation.DEFAULT_MINOR_AGE))
        birth_date = cleaned_data.get("date_of_birth")
        if birth_date and validation.is_minor(birth_date, threshold):
            for name in ("parent_name", "parent_email"):
                if not cleaned_data.get(name):
                    self.add_error(name, "Obligatorio para menores de edad")
        return cleaned_data

    def save(self, commit=True):
        profile = super(OnboardingForm, self).save(commit=False)
        profile.onboarding_completed = True
        if commit:
            profile.save()
        return profile


class CSVImportForm(forms.Form):
    users_file = forms.FileField(label="CSV de usuarios", required=False)
    teams_file = forms.FileField(label="CSV de equipos", required=False)
    admin_email = forms.EmailField(label="Enviar el resumen a", required=False)

    def _read(self, name, required_headers):
        upload = self.cleaned_data.get(name)
        if not upload:
            return ""
        contents = upload.read()
        try:
            CsvWorkbook(contents, required_headers)
        except InvalidWorkbookException as e:
            raise forms.ValidationError(str(e))
        return contents.decode("utf-8-sig")

    def clean_users_file(self):
        return self._read("users_file", USER_HEADERS)

    def clean_teams_file(self):
        return self._read("teams_file", TEAM_HEADERS)

    def clean(self):
        cleaned_data = super(CSVImportForm, self).clean()
        if not (self.errors or cleaned_data.get("users_file")
                or cleaned_data.get("teams_file")):
            raise forms.ValidationError("Sube al menos un CSV")
        return cleaned_data

    def file_name(self):
        names = [self.files[name].name for name in ("users_file", "teams_file")
                 if name in self.files]
        return ", ".join(names)[:255]
