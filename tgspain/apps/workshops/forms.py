from django import forms

from tgspain.apps.workshops.models import Workshop, WorkshopAssignment, WorkshopTimeSlot


class PreferencesForm(forms.Form):
    """One select per rank; every workshop of the event has to be ranked"""

    def __init__(self, *args, **kwargs):
        self.workshops = list(kwargs.pop("workshops"))
        initial_order = kwargs.pop("initial_order", [])
        super(PreferencesForm, self).__init__(*args, **kwargs)

        choices = [("", "---------")] + [(w.pk, w.name) for w in self.workshops]
        for rank in range(1, len(self.workshops) + 1):
            initial = initial_order[rank - 1] if rank <= len(initial_order) else None
            self.fields[f"rank_{rank}"] = forms.TypedChoiceField(
                label=f"Preferencia {rank}",
                choices=choices,
                coerce=int,
                initial=initial,
            )

    def clean(self):
        cleaned_data = super(PreferencesForm, self).clean()
        ordered = self.ordered_workshop_ids()
        if len(ordered) == len(self.workshops) and len(set(ordered)) != len(ordered):
            raise forms.ValidationError("No puedes repetir un taller en tus preferencias")
        return cleaned_data

    def ordered_workshop_ids(self):
        return [self.cleaned_data[f"rank_{rank}"]
                for rank in range(1, len(self.workshops) + 1)
                if self.cleaned_data.get(f"rank_{rank}")]


class TimeSlotForm(forms.Form):
    start_time = forms.TimeField(label="Inicio", widget=forms.TimeInput(attrs={"type": "time"}))
    end_time = forms.TimeField(label="Fin", widget=forms.TimeInput(attrs={"type": "time"}))

    def clean(self):
        cleaned_data = super(TimeSlotForm, self).clean()
        start, end = cleaned_data.get("start_time"), cleaned_data.get("end_time")
        if start and end and end <= start:
            raise forms.ValidationError("El turno debe terminar después de empezar")
        return cleaned_data


TimeSlotFormSet = forms.formset_factory(TimeSlotForm, extra=1, can_delete=True)


class ManualAssignmentForm(forms.Form):
    team_id = forms.IntegerField(widget=forms.HiddenInput)
    assignment_slot = forms.ChoiceField(label="Posición",
                                        choices=WorkshopAssignment.SLOT_CHOICES)
    workshop = forms.ModelChoiceField(queryset=Workshop.objects.none(), label="Taller")
    time_slot = forms.ModelChoiceField(queryset=WorkshopTimeSlot.objects.none(),
                                       label="Turno")

    def __init__(self, *args, **kwargs):
        event = kwargs.pop("event")
        super(ManualAssignmentForm, self).__init__(*args, **kwargs)
        self.fields["workshop"].queryset = event.workshops.all()
        self.fields["time_slot"].queryset = event.workshop_time_slots.all()
