"""
Email service for account notifications.
"""
import logging
import os
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
from jinja2 import Template

logger = logging.getLogger(__name__)

RESET_EMAIL_TEMPLATE = Template("""
<html>
<body>
    <h2>Recuperação de senha</h2>

    {% if nome %}
    <p>Olá {{ nome }},</p>
    {% else %}
    <p>Olá,</p>
    {% endif %}

    <p>Recebemos um pedido para redefinir a senha da sua conta no GEV App.</p>

    <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0;">
        <p><strong>Código de redefinição:</strong> {{ token }}</p>
    </div>

    <p>O código expira em {{ minutos }} minutos e só pode ser usado uma vez.</p>

    <p>Se você não fez este pedido, ignore este email.</p>
</body>
</html>
""")


class EmailService:
    def __init__(self):
        self.smtp_server = os.getenv("SMTP_SERVER", "smtp.gmail.com")
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_username = os.getenv("SMTP_USERNAME")
        self.smtp_password = os.getenv("SMTP_PASSWORD")
        self.from_email = os.getenv("FROM_EMAIL", self.smtp_username)

    async def send_password_reset_email(self, to_email: str, token: str, minutes: int,
                                        nome: Optional[str] = None) -> bool:
        """
        Send a password reset code.

        Args:
            to_email: Account email address
            token: The plaintext reset token (only ever leaves the server here)
            minutes: Token lifetime shown to the user
            nome: Optional account holder name

        Returns:
            True when the message was handed to the SMTP server
        """
        html_content = RESET_EMAIL_TEMPLATE.render(nome=nome, token=token, minutos=minutes)

        message = MIMEMultipart("alternative")
        message["Subject"] = "Recuperação de senha - GEV App"
        message["From"] = self.from_email or ""
        message["To"] = to_email
        message.attach(MIMEText(html_content, "html"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_server,
                port=self.smtp_port,
                start_tls=True,
                username=self.smtp_username,
                password=self.smtp_password,
            )
            logger.info("Password reset email sent to %s", to_email)
            return True
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Failed to send password reset email to %s: %s", to_email, e)
            return False


# Global email service instance
email_service = EmailService()
