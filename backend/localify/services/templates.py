from localify.models.enums import FileType

_TEMPLATES: dict[FileType, str] = {
    FileType.html: """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>New Project</title>
    <link rel="stylesheet" href="styles.css">
    <script src="script.js" defer></script>
</head>
<body>
    <h1>Welcome to Your New Project</h1>
    <p>Start editing your files to build your web project!</p>
</body>
</html>""",
    FileType.css: """/* Project Styles */

body {
    font-family: Arial, sans-serif;
    margin: 0;
    padding: 20px;
    line-height: 1.6;
}

h1 {
    color: #2c3e50;
    text-align: center;
}

p {
    color: #34495e;
    text-align: center;
}""",
    FileType.js: """// Project JavaScript

document.addEventListener('DOMContentLoaded', () => {
    console.log('Project initialized!');

    // Add your JavaScript code here
});""",
}

# (name, type) of the files every new project starts with; index.html links the other two
DEFAULT_FILES: list[tuple[str, FileType]] = [
    ("index", FileType.html),
    ("styles", FileType.css),
    ("script", FileType.js),
]


def default_template(file_type: FileType) -> str:
    return _TEMPLATES[file_type]
