import json

from django import forms

from catalog.importer.columns import MappingConfig


class CsvImportForm(forms.Form):
    csv_file = forms.FileField()
    mapping = forms.CharField(required=False, widget=forms.HiddenInput)

    def clean_csv_file(self):
        upload = self.cleaned_data["csv_file"]
        if not upload.name.lower().endswith((".csv", ".txt")):
            raise forms.ValidationError("Upload a .csv file.")
        if upload.size == 0:
            raise forms.ValidationError("The uploaded file is empty.")
        return upload

    def clean_mapping(self):
        raw = (self.cleaned_data.get("mapping") or "").strip()
        if not raw:
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            raise forms.ValidationError("Invalid column mapping payload.") from None
        try:
            config = MappingConfig.from_dict(payload)
        except ValueError as exc:
            raise forms.ValidationError(str(exc)) from None
        if not config.mapped_count:
            raise forms.ValidationError("Column mapping must map at least one column.")
        return config
