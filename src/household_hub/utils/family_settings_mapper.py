"""Projection of stored family settings into the outward API view."""

from household_hub.models.family_settings_models import AISettingsView, FamilySettingsDocument, FamilySettingsView


def to_family_settings_view(settings: FamilySettingsDocument) -> FamilySettingsView:
    """
    Build the API view of `settings`.

    Only the listed fields are copied. The AI secret has no counterpart on the view
    models, so it cannot appear in a response.
    """
    return FamilySettingsView(
        familyId=str(settings.family_id),
        enabledFeatures=[feature.value for feature in settings.enabled_features],
        aiSettings=AISettingsView(
            apiEndpoint=settings.ai_settings.api_endpoint,
            modelName=settings.ai_settings.model_name,
            aiName=settings.ai_settings.ai_name,
        ),
    )
