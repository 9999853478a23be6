"""
Contact Form Service

Dispatches a contact-form submission according to the configured action:
``whatsapp`` builds a wa.me deep link for the browser to open, ``email``
sends the submission to the school's inbox through Flask-Mail.
"""

import logging
import re
import smtplib
from urllib.parse import quote

from flask_mail import Message
from markupsafe import escape
from sqlalchemy.exc import SQLAlchemyError

from schoolsite.errors import ConfigError, EmailDeliveryError, ValidationError

logger = logging.getLogger(__name__)

ACTION_WHATSAPP = 'whatsapp'
ACTION_EMAIL = 'email'

CONTACT_SETTING_NAMES = ('contactFormAction', 'schoolContactEmail', 'adminSchoolWhatsappNumber')
CONTACT_FIELDS = ('contactName', 'contactEmail', 'contactSubject', 'contactMessage')

# Characters JavaScript's encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_whatsapp_url(number, name, email, subject, message):
    body = (
        'New Contact Form Submission:\n'
        f'Name: {name}\n'
        f'Email: {email}\n'
        f'Subject: {subject}\n'
        f'Message:\n{message}'
    )
    digits = re.sub(r'\D', '', number)
    return f'https://wa.me/{digits}?text={quote(body, safe=_URI_COMPONENT_SAFE)}'


class ContactDispatcher:
    """Stateless handler for contact-form submissions."""

    def __init__(self, settings_store, mail, config):
        self.settings_store = settings_store
        self.mail = mail
        self.config = config

    def mailer_configured(self):
        if self.config.get('MAIL_SUPPRESS_SEND'):
            return True
        return bool(
            self.config.get('MAIL_SERVER')
            and self.config.get('MAIL_USERNAME')
            and self.config.get('MAIL_PASSWORD')
        )

    def _contact_settings(self):
        try:
            return self.settings_store.get_many(CONTACT_SETTING_NAMES)
        except SQLAlchemyError as e:
            self.settings_store.db.session.rollback()
            logger.error('Error fetching contact settings from DB: %s', e)
            return {}

    def dispatch(self, form):
        if not isinstance(form, dict):
            raise ValidationError('All fields are required.')
        fields = {key: str(form.get(key) or '').strip() for key in CONTACT_FIELDS}
        if not all(fields.values()):
            raise ValidationError('All fields are required.')

        settings = self._contact_settings()
        action = (
            settings.get('contactFormAction')
            or self.config.get('CONTACT_FORM_ACTION_DEFAULT')
            or ACTION_WHATSAPP
        )

        if action == ACTION_WHATSAPP:
            return self._whatsapp(settings, **fields)
        if action == ACTION_EMAIL:
            return self._email(settings, **fields)

        logger.error('Unknown contactFormAction: %s', action)
        raise ConfigError('Server configuration error: Invalid contact form action.')

    def _whatsapp(self, settings, contactName, contactEmail, contactSubject, contactMessage):
        number = settings.get('adminSchoolWhatsappNumber') or self.config.get('SCHOOL_WHATSAPP_NUMBER')
        if not number or not re.search(r'\d', number):
            logger.error('WhatsApp number not configured for contact form.')
            raise ConfigError('Server error: WhatsApp number not set.')

        url = build_whatsapp_url(number, contactName, contactEmail, contactSubject, contactMessage)
        return {
            'success': True,
            'action': ACTION_WHATSAPP,
            'whatsappUrl': url,
            'message': "Please click 'Send' in WhatsApp.",
        }

    def _email(self, settings, contactName, contactEmail, contactSubject, contactMessage):
        if not self.mailer_configured():
            logger.error('Mail transport not available for email action.')
            raise ConfigError('Server error: Email service not available.')

        recipient = settings.get('schoolContactEmail') or self.config.get('SCHOOL_CONTACT_EMAIL_TO')
        if not recipient:
            logger.error('School contact email (to send TO) is not configured.')
            raise ConfigError('Server error: Recipient email not set.')

        msg = Message(
            subject=f'New Contact Form: {contactSubject}',
            sender=(f'{contactName} via School Website', self.config.get('EMAIL_FROM_ADDRESS')),
            recipients=[recipient],
            reply_to=contactEmail,
        )
        msg.body = (
            'You have a new submission:\n\n'
            f'Name: {contactName}\n'
            f'Email: {contactEmail}\n\n'
            f'Message:\n{contactMessage}'
        )
        message_html = str(escape(contactMessage)).replace('\n', '<br>')
        msg.html = (
            '<p>You have a new submission:</p>'
            f'<ul><li><strong>Name:</strong> {escape(contactName)}</li>'
            f'<li><strong>Email:</strong> {escape(contactEmail)}</li></ul>'
            '<p><strong>Message:</strong></p>'
            f'<p>{message_html}</p>'
        )

        try:
            self.mail.send(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error('Error sending contact email to %s: %s', recipient, e)
            raise EmailDeliveryError() from e

        logger.info('Contact form email sent successfully to: %s', recipient)
        return {
            'success': True,
            'action': ACTION_EMAIL,
            'message': 'Your message has been sent successfully!',
        }
