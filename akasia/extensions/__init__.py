from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager

from akasia.extensions.s3 import S3Client
from akasia.extensions.whatsapp import WhatsAppClient

db = SQLAlchemy()
jwt = JWTManager()
s3 = S3Client()
whatsapp = WhatsAppClient()
