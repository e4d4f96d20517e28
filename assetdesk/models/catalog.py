"""
Catalog models: vendors, brands, product types and products.
"""
from datetime import datetime

from assetdesk.extensions import db


class Vendor(db.Model):
    """Supplier an asset was purchased from."""

    __tablename__ = 'vendors'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.Text)
    website = db.Column(db.String(255))
    contact_email = db.Column(db.String(120))
    contact_phone = db.Column(db.String(30))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    assets = db.relationship('Asset', back_populates='vendor')

    def __repr__(self):
        return f'<Vendor {self.name}>'


class Brand(db.Model):
    """Manufacturer brand."""

    __tablename__ = 'brands'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text)
    website = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    products = db.relationship('Product', back_populates='brand')

    def __repr__(self):
        return f'<Brand {self.name}>'


class ProductType(db.Model):
    """Product category (Microphone, Speaker, ...)."""

    __tablename__ = 'product_types'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    products = db.relationship('Product', back_populates='type')

    def __repr__(self):
        return f'<ProductType {self.name}>'


class Product(db.Model):
    """Catalog entry that physical assets are instances of."""

    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False, index=True)
    brand_id = db.Column(db.Integer, db.ForeignKey('brands.id'), nullable=True)
    type_id = db.Column(db.Integer, db.ForeignKey('product_types.id'), nullable=True)
    description = db.Column(db.Text)
    model_number = db.Column(db.String(100))
    default_price = db.Column(db.Numeric(10, 2))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    brand = db.relationship('Brand', back_populates='products')
    type = db.relationship('ProductType', back_populates='products')
    assets = db.relationship('Asset', back_populates='product')

    def __repr__(self):
        return f'<Product {self.name}>'
