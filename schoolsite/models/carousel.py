"""
Carousel Image Model
"""

from schoolsite.extensions import db


class CarouselImage(db.Model):
    """Rotating banner image shown on the public site"""
    __tablename__ = 'carousel_images'

    id = db.Column(db.Integer, primary_key=True)
    image_url = db.Column(db.Text, nullable=False)
    link_url = db.Column(db.Text)
    alt_text = db.Column(db.Text)
    file_name = db.Column(db.Text)
    display_order = db.Column(db.Integer, nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'image_url': self.image_url,
            'link_url': self.link_url,
            'alt_text': self.alt_text,
            'file_name': self.file_name,
            'display_order': self.display_order,
        }

    def __repr__(self):
        return f'<CarouselImage {self.id} order:{self.display_order}>'
