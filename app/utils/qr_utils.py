import qrcode
import os

from app.core.errors import QrGenerationError


def generate_qr_for_link(link: str, qr_path: str) -> str:
    """
    Generate QR code for an album's public view link and save it as PNG
    """
    try:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4
        )
        qr.add_data(link)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        os.makedirs(os.path.dirname(qr_path), exist_ok=True)
        img.save(qr_path)
    except Exception as e:
        raise QrGenerationError(f"QR code generation failed: {e}") from e
    return qr_path
