"""Full-screen dashboard showing service statuses and logs."""