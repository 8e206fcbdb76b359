SECRET_KEY = ""
