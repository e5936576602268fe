from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired


class ImageUploadForm(FlaskForm):
    file = FileField(validators=[FileRequired("No file provided")])
