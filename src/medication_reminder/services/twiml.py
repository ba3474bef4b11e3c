"""Render call actions as TwiML."""

from dataclasses import dataclass

from twilio.twiml.voice_response import VoiceResponse

from medication_reminder.models.call import CallAction, NextStep


@dataclass(frozen=True)
class VoiceRoutes:
    """Paths Twilio is sent to from inside a call (relative to the webhook URL)."""

    response: str = "/voice/response"
    no_response: str = "/voice/no-response"


def render_twiml(
    action: CallAction,
    voice: str = "alice",
    language: str = "en-US",
    routes: VoiceRoutes = VoiceRoutes(),
) -> str:
    """
    Serialize ``action`` into a TwiML document.

    <Say> comes first, then an empty <Gather> when listening for speech,
    then <Redirect> or <Hangup> depending on the next step. An action with
    nothing to do renders an empty <Response/>.
    """
    response = VoiceResponse()

    if action.spoken_text:
        response.say(action.spoken_text, voice=voice)

    if action.listen_for_speech:
        response.gather(
            input="speech",
            timeout=action.listen_timeout,
            speech_timeout="auto",
            action=routes.response,
            method="POST",
            language=language,
        )

    if action.next_step is NextStep.REDIRECT_TO_NO_RESPONSE:
        response.redirect(routes.no_response, method="POST")
    elif action.next_step is NextStep.END_CALL:
        response.hangup()

    return str(response)
