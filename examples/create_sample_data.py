"""Script to create sample data and a bound template for trying the CLI."""

from pathlib import Path

import pandas as pd

from certengine import apply_bindings, create_default_template, detect_fields, match_headers
from certengine.parsers import save_template_file


def create_sample_data():
    """Create sample CSV/Excel files and a template bound to them."""

    # Sample recipients; headers deliberately differ from the template fields
    recipients = [
        {"Full Name": "Ana Reyes", "email_address": "ana@example.com", "Course Name": "Python Basics", "Issue Date": "2026-03-01", "Score": "95"},
        {"Full Name": "Bo Lindqvist", "email_address": "bo@example.com", "Course Name": "Python Basics", "Issue Date": "2026-03-01", "Score": "88"},
        {"Full Name": "Chidi Okafor", "email_address": "chidi@example.com", "Course Name": "Data Analysis", "Issue Date": "2026-03-08", "Score": "91"},
        {"Full Name": "Dana Whitfield", "email_address": "dana@example.com", "Course Name": "Data Analysis", "Issue Date": "2026-03-08", "Score": "79"},
        {"Full Name": "Emre Yildiz", "email_address": "emre@example.com", "Course Name": "Web APIs", "Issue Date": "2026-03-15", "Score": "84"},
    ]

    df = pd.DataFrame(recipients)

    output_dir = Path(__file__).parent
    csv_path = output_dir / "sample_recipients.csv"
    xlsx_path = output_dir / "sample_recipients.xlsx"

    df.to_csv(csv_path, index=False)
    df.to_excel(xlsx_path, index=False, sheet_name="Recipients")

    # Bind the stock template to the sample headers
    template = create_default_template()
    mapping = match_headers(list(df.columns), detect_fields(template.elements))
    template = apply_bindings(template, mapping)
    template_path = save_template_file(template, str(output_dir / "sample_template.json"))

    print(f"Created sample data: {csv_path}")
    print(f"Created sample data: {xlsx_path}")
    print(f"Created bound template: {template_path}")
    print(f"Total rows: {len(recipients)}")
    print("\nBindings:")
    for field_name, header in mapping.items():
        print(f"  {field_name} -> {header}")

    return csv_path


if __name__ == "__main__":
    create_sample_data()
