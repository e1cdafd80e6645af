# payment/forms.py
from django import forms
from django.utils.translation import gettext_lazy as _

from . import validators as val


def _text(placeholder, **extra):
    attrs = {"class": "form-control", "placeholder": placeholder}
    attrs.update(extra)
    return forms.TextInput(attrs=attrs)


class PaymentForm(forms.Form):
    email = forms.CharField(
        label=_("Email Address"), max_length=254,
        widget=forms.EmailInput(attrs={"class": "form-control", "placeholder": "Email Address"}),
    )
    card_name = forms.CharField(label=_("Card Name"), max_length=120, widget=_text("John Doe"))
    card_number = forms.CharField(
        label=_("Card Number"), max_length=32,
        widget=_text("1234 1234 1234 1234", inputmode="numeric", autocomplete="cc-number"),
    )
    expiry_date = forms.CharField(
        label=_("Expiry Date"), max_length=7,
        widget=_text("MM/YY", inputmode="numeric", autocomplete="cc-exp"),
    )
    cvv = forms.CharField(label=_("CVV"), max_length=4, widget=_text("CVV", inputmode="numeric"))
    billing_address = forms.CharField(
        label=_("Billing Address"), max_length=255, widget=_text("12 SW Longer Str madeylia"),
    )

    def clean_email(self):
        email = self.cleaned_data["email"].strip()
        if not val.is_valid_email(email):
            raise forms.ValidationError(_("Enter a valid email address."))
        return email

    def clean_card_number(self):
        raw = self.cleaned_data["card_number"]
        card_type = val.detect_card_type(raw)
        if card_type is None:
            raise forms.ValidationError(_("Card type not recognised."))
        # kept even when the length check fails so the CVV rule follows the brand
        self.cleaned_data["card_type"] = card_type
        if not val.is_valid_card_number(raw):
            raise forms.ValidationError(
                _("%(brand)s card numbers have %(n)d digits."),
                params={"brand": card_type, "n": val.CARD_LENGTHS.get(card_type, val.DEFAULT_CARD_LENGTH)},
            )
        return val.format_card_number(raw)

    def clean_expiry_date(self):
        raw = self.cleaned_data["expiry_date"]
        if not val.is_valid_expiry_format(raw):
            raise forms.ValidationError(_("Use the MM/YY format."))
        if val.is_expiry_in_past(raw):
            raise forms.ValidationError(_("This card has expired."))
        return val.format_expiry(raw)

    def clean_cvv(self):
        cvv = self.cleaned_data["cvv"].strip()
        card_type = self.cleaned_data.get("card_type")
        if not val.is_valid_cvv(cvv, card_type):
            raise forms.ValidationError(
                _("CVV must be %(n)d digits."), params={"n": val.cvv_length(card_type)},
            )
        return cvv

    def clean_billing_address(self):
        address = self.cleaned_data["billing_address"].strip()
        if not val.is_valid_billing_address(address):
            raise forms.ValidationError(
                _("Billing address must be at least %(n)d characters."),
                params={"n": val.MIN_BILLING_ADDRESS},
            )
        return address

    @property
    def last4(self) -> str:
        return val.digits(self.cleaned_data.get("card_number", ""))[-4:]
